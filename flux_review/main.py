from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from typing import Optional
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
import uvicorn
import errno
import logging
import socket
import sys
import time

from flux_review.core.config import Settings, get_settings
from flux_review.core.errors import ServiceError, StartupError
from flux_review.db.base import Base
from flux_review.db.session import create_db_engine, create_session_factory, ping
from flux_review.middleware.performance import PerformanceMiddleware
from flux_review.services.directory import CandidateDirectory
from flux_review import models  # noqa: F401  (registers tables on Base.metadata)

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    handlers = [logging.StreamHandler(sys.stdout)]
    if settings.LOG_FILE:
        handlers.append(logging.FileHandler(settings.LOG_FILE))
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database before serving requests and release it on shutdown."""
    settings: Settings = app.state.settings
    logger.info("Starting up Flux Review backend...")

    engine = create_db_engine(settings)
    try:
        ping(engine)
    except SQLAlchemyError as e:
        engine.dispose()
        logger.error(f"Database connection failed: {e}")
        raise StartupError("Database unreachable at startup") from e
    logger.info("Database connection established")

    required_tables = list(Base.metadata.tables)
    if settings.AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=engine)
    else:
        existing_tables = inspect(engine).get_table_names()
        missing_tables = [t for t in required_tables if t not in existing_tables]
        if missing_tables:
            logger.warning(f"Missing database tables: {missing_tables}")
            logger.warning("Run `alembic upgrade head` or scripts/setup_database.py before serving traffic")
        else:
            logger.info("All required database tables exist")

    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    yield

    logger.info("Shutting down Flux Review backend...")
    engine.dispose()
    logger.info("Flux Review backend shutdown complete")


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": True,
            "message": message,
            "status_code": status_code,
        },
    )


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())[1:]) or "body"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__}: {exc.message} - {request.url}")
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        message = _describe_validation_error(exc)
        logger.info(f"Rejected request {request.method} {request.url.path}: {message}")
        return _error_response(400, message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Global HTTP exception handler"""
        logger.error(f"HTTP {exc.status_code}: {exc.detail} - {request.url}")
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Global exception handler for unhandled exceptions"""
        logger.error(f"Unhandled exception: {exc} - {request.url}")
        return _error_response(500, "Internal server error")


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="Candidate review scoring service",
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        docs_url=f"{settings.API_PREFIX}/docs",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.directory = CandidateDirectory(settings.APPLICATIONS_PATH)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(PerformanceMiddleware, slow_request_ms=settings.SLOW_REQUEST_MS)

    from flux_review.api.v1.api import api_router
    from flux_review.api.v1.endpoints.health import root_router

    app.include_router(api_router, prefix=settings.API_PREFIX)
    app.include_router(root_router, tags=["health"])

    register_exception_handlers(app)

    if settings.METRICS_ENABLED:
        from prometheus_fastapi_instrumentator import Instrumentator
        Instrumentator().instrument(app).expose(app, endpoint="/metrics")

    logger.info(f"Application configured for {settings.ENVIRONMENT.value} environment")
    return app


def bind_socket(host: str, port: int, attempts: int, delay: float = 0.5) -> socket.socket:
    """Bind ``port``, moving to the next port while it is in use.

    Gives up after ``attempts`` extra ports and raises StartupError.
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    for attempt in range(attempts + 1):
        candidate = port + attempt
        sock = socket.socket(family, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, candidate))
        except OSError as e:
            sock.close()
            if e.errno == errno.EADDRINUSE and attempt < attempts:
                logger.warning(f"Port {candidate} in use, trying {candidate + 1}...")
                time.sleep(delay)
                continue
            raise StartupError(f"Could not bind {host}:{candidate}: {e}") from e
        return sock
    raise StartupError(f"No free port in {port}-{port + attempts}")


# Create the FastAPI app instance
app = create_application()


def main() -> None:
    settings: Settings = app.state.settings
    try:
        sock = bind_socket(
            settings.SERVER_HOST,
            settings.SERVER_PORT,
            settings.PORT_BIND_ATTEMPTS,
            settings.PORT_RETRY_DELAY_SECONDS,
        )
    except StartupError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(f"Server running on port {sock.getsockname()[1]}")
    server = uvicorn.Server(uvicorn.Config(app, lifespan="on", log_level=settings.LOG_LEVEL.lower()))
    server.run(sockets=[sock])
    if not server.started:
        logger.error("Server failed to start")
        sys.exit(1)


if __name__ == "__main__":
    main()
