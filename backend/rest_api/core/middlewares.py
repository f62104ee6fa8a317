"""
HTTP middlewares for the FastAPI application.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from shared.config.logging import rest_api_logger as logger
from shared.infrastructure.correlation import CorrelationIdMiddleware


JSON_MEDIA_TYPE = "application/json"


class JSONBodyMiddleware(BaseHTTPMiddleware):
    """
    Reject request bodies that are not JSON with 415.

    Bodiless POSTs (close, reserve) send no Content-Type and pass through.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method in ("POST", "PUT", "PATCH"):
            content_type = request.headers.get("content-type")
            media_type = (content_type or "").split(";")[0].strip().lower()
            if content_type and media_type != JSON_MEDIA_TYPE:
                logger.warning(
                    "Rejected non-JSON body",
                    path=request.url.path,
                    content_type=content_type,
                )
                return JSONResponse(
                    status_code=415,
                    content={
                        "detail": "Request body must be application/json",
                        "code": "unsupported_media_type",
                    },
                )
        return await call_next(request)


def register_middlewares(app: FastAPI) -> None:
    # Added last runs first: ids are bound before a 415 is logged
    app.add_middleware(JSONBodyMiddleware)
    app.add_middleware(CorrelationIdMiddleware)
