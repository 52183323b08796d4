"""
Request logging middleware.

One line when a request arrives and one when it leaves, tagged with a
correlation id and the tenant the request is acting for.
"""

import logging
import time
import uuid
from collections.abc import Callable
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """HTTP middleware for request/response logging."""

    # High-frequency, low-value paths
    EXCLUDE_PATHS: tuple[str, ...] = ("/health", "/favicon.ico")

    def __init__(self, app: ASGIApp, tenant_header: str = "X-Tenant-ID") -> None:
        super().__init__(app)
        self._tenant_header = tenant_header

    def _should_log(self, path: str) -> bool:
        return not any(path.startswith(exclude) for exclude in self.EXCLUDE_PATHS)

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())[:8]
        request.state.correlation_id = correlation_id

        if not self._should_log(request.url.path):
            response = await call_next(request)
            response.headers[CORRELATION_HEADER] = correlation_id
            return response

        tenant = request.headers.get(self._tenant_header, "-")
        start_time = time.perf_counter()
        logger.info(f"[{correlation_id}] --> {request.method} {request.url.path} tenant={tenant}")

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"[{correlation_id}] <-- {request.method} {request.url.path} ERROR in {duration_ms:.2f}ms: {e}"
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        log_level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            log_level,
            f"[{correlation_id}] <-- {request.method} {request.url.path} "
            f"{response.status_code} in {duration_ms:.2f}ms",
        )

        response.headers[CORRELATION_HEADER] = correlation_id
        response.headers["X-Response-Time-Ms"] = f"{duration_ms:.2f}"
        return response
