import time
from typing import Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request, tagged with the GitHub delivery if any."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        log = logger.bind(
            method=request.method,
            path=request.url.path,
            delivery=request.headers.get("X-GitHub-Delivery"),
            github_event=request.headers.get("X-GitHub-Event"),
            client=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            log.error(
                "HTTP request exception",
                duration=round((time.perf_counter() - start_time) * 1000, 2),
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise

        log.info(
            "HTTP request",
            status_code=response.status_code,
            duration=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return response
