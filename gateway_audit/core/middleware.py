"""Request size middleware for the FastAPI application."""

import logging
from collections.abc import Callable

from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

_TOO_LARGE_BODY = (
    '{"error":"RequestTooLarge","message":"Request body exceeds maximum allowed size"}'
)


def _too_large() -> Response:
    return Response(
        content=_TOO_LARGE_BODY,
        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        media_type="application/json",
    )


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """
    Middleware to limit request body size.

    Gateway configurations are posted whole, so the limit bounds how much
    work a single audit request can ask for. Both the Content-Length header
    and the actual body are checked, since the header can be missing or
    wrong.
    """

    def __init__(self, app, max_size_mb: int = 1):
        """
        Initialize middleware with max request size.

        Args:
            app: FastAPI application
            max_size_mb: Maximum request size in megabytes (default: 1MB)
        """
        super().__init__(app)
        self.max_size_bytes = max_size_mb * 1024 * 1024

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit():
            size = int(content_length)
            if size > self.max_size_bytes:
                logger.warning(
                    f"Request size {size} bytes (from header) exceeds limit "
                    f"{self.max_size_bytes} bytes",
                    extra={"path": request.url.path},
                )
                return _too_large()

        if request.method in ("POST", "PUT", "PATCH"):
            body = await request.body()
            if len(body) > self.max_size_bytes:
                logger.warning(
                    f"Request size {len(body)} bytes (actual) exceeds limit "
                    f"{self.max_size_bytes} bytes",
                    extra={"path": request.url.path},
                )
                return _too_large()

            # The body was consumed above; replay it for downstream handlers
            async def receive():
                return {"type": "http.request", "body": body}

            request._receive = receive

        return await call_next(request)
