import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from flux_review.core.config import Settings

logger = logging.getLogger(__name__)


def create_db_engine(settings: Settings) -> Engine:
    """Build the engine for the configured database.

    PostgreSQL gets a connection pool sized for the threadpool FastAPI runs
    sync routes on; SQLite connections are shared across those threads.
    """
    uri = settings.SQLALCHEMY_DATABASE_URI
    if uri.startswith("sqlite"):
        return create_engine(
            uri,
            connect_args={"check_same_thread": False, "timeout": 30},
            echo=False,
        )
    return create_engine(
        uri,
        pool_size=10,
        max_overflow=20,
        pool_recycle=300,      # Recycle connections every 5 minutes
        pool_pre_ping=True,    # Validate connections before use
        pool_timeout=30,
        echo=False,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def ping(engine: Engine) -> None:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


@contextmanager
def get_db_session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Session scope for scripts and startup tasks.

    Usage:
        with get_db_session(factory) as db:
            score_store.bulk_ensure(db, roll_nos)
    """
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Database session error: {e}")
        raise
    finally:
        db.close()
