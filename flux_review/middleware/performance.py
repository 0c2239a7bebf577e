"""
Request timing middleware.

Pure ASGI middleware that times every HTTP request, feeds the latency
histogram and logs slow or failed requests.
"""

import time
import logging

from ..core.metrics import http_request_duration_seconds

logger = logging.getLogger(__name__)

SKIP_PATHS = ("/docs", "/redoc", "/openapi.json", "/favicon.ico", "/metrics")


class PerformanceMiddleware:
    """Middleware to track HTTP request performance"""

    def __init__(self, app, slow_request_ms: int = 2000):
        self.app = app
        self.slow_request_ms = slow_request_ms

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http" or scope["path"].startswith(SKIP_PATHS):
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        status_code = 500

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as e:
            logger.error(f"Request processing error: {e}")
            raise
        finally:
            elapsed = time.perf_counter() - start_time
            self._record(scope["method"], scope["path"], status_code, elapsed)

    def _record(self, method: str, path: str, status_code: int, elapsed: float):
        http_request_duration_seconds.labels(method=method, status=str(status_code)).observe(elapsed)
        response_time_ms = elapsed * 1000

        if response_time_ms > self.slow_request_ms:
            logger.warning(
                f"Slow request: {method} {path} "
                f"took {response_time_ms:.0f}ms (status: {status_code})"
            )

        if status_code >= 400:
            logger.warning(
                f"Request error: {method} {path} "
                f"returned {status_code} in {response_time_ms:.0f}ms"
            )
