"""
HTTP middleware: correlation ids and request logging.
"""
import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from app.core.config import settings
from app.core.logging import new_request_id, request_id_var

logger = logging.getLogger(__name__)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Reads or creates the request id and echoes it on the response."""

    async def dispatch(self, request: Request, call_next):
        req_id = new_request_id(request.headers.get(settings.request_id_header))
        try:
            response = await call_next(request)
        finally:
            request_id_var.set("")
        response.headers[settings.request_id_header] = req_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Process-Time"] = f"{elapsed_ms:.2f}ms"
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={"duration_ms": round(elapsed_ms, 2)},
        )
        return response
