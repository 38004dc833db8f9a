"""Request id propagation for logs and responses."""

from __future__ import annotations

import logging
import time
from contextvars import ContextVar
from uuid import uuid4

from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    """Return the current request id if available."""
    return _request_id.get()


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Attach a request_id to each request, its log lines and its response."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        token = _request_id.set(request_id)
        request.state.request_id = request_id

        span = trace.get_current_span()
        if span.is_recording():
            span.set_attribute("request.id", request_id)

        start_time = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "[Request] %s %s -> %s (%.1f ms)",
                request.method,
                request.url.path,
                status_code,
                duration_ms,
            )
            _request_id.reset(token)
