"""Request logging middleware for structured logging."""

import logging
import time
from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from photofeed.utils.logging import get_logger, reset_request_id, set_request_id

logger = get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each HTTP request with timing and tag the response with a request id."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid4())
        request.state.request_id = request_id
        token = set_request_id(request_id)
        try:
            return await self._log_request(request, call_next, request_id)
        finally:
            reset_request_id(token)

    async def _log_request(self, request: Request, call_next: Callable, request_id: str) -> Response:
        method = request.method
        path = request.url.path
        client_ip = request.client.host if request.client else "unknown"
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"{method} {path} ERROR: {e}",
                extra={
                    "endpoint": path,
                    "method": method,
                    "status_code": 500,
                    "duration_ms": round(duration_ms, 2),
                    "client_ip": client_ip,
                    "error": str(e),
                },
                exc_info=True,
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        status_code = response.status_code
        logger.log(
            logging.INFO if status_code < 400 else logging.WARNING,
            f"{method} {path} {status_code}",
            extra={
                "endpoint": path,
                "method": method,
                "status_code": status_code,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        response.headers["X-Request-ID"] = request_id
        return response
