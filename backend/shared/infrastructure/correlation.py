"""
Request correlation.

Each request gets an id (the caller's X-Request-ID or a fresh one) and,
when the header is present, the acting staff id from X-Staff-Id. Both
stay bound to context variables while the request is served, so every
log line emitted on its behalf carries them.
"""

import logging
import uuid
from contextvars import ContextVar

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response


REQUEST_ID_HEADER = "X-Request-ID"
STAFF_ID_HEADER = "X-Staff-Id"

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
staff_id_var: ContextVar[str | None] = ContextVar("staff_id", default=None)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Bind request and staff ids, and echo the request id on the response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        staff_id = (request.headers.get(STAFF_ID_HEADER) or "").strip() or None

        request_token = request_id_var.set(request_id)
        staff_token = staff_id_var.set(staff_id)
        try:
            response = await call_next(request)
        finally:
            staff_id_var.reset(staff_token)
            request_id_var.reset(request_token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class CorrelationIdFilter(logging.Filter):
    """Stamp request_id and staff_id on every record ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        record.staff_id = staff_id_var.get() or "-"
        return True
