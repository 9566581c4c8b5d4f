"""
Security headers middleware for FastAPI.

The API only ever answers with JSON or Prometheus text, so apart from the
interactive docs every response gets the strictest policy.
"""

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

# Paths that should have relaxed security (docs, OpenAPI schema)
DOCS_PATHS = {"/docs", "/redoc", "/openapi.json"}

_API_CSP = "; ".join(
    [
        "default-src 'none'",
        "frame-ancestors 'none'",
        "base-uri 'none'",
        "form-action 'none'",
    ]
)

_DOCS_CSP = "; ".join(
    [
        "default-src 'self'",
        "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net",
        "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net",
        "img-src 'self' data: https://fastapi.tiangolo.com",
        "connect-src 'self'",
    ]
)

_PERMISSIONS_POLICY = ", ".join(["geolocation=()", "microphone=()", "camera=()", "payment=()"])


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds security headers to all HTTP responses.

    Headers added:
    - Strict-Transport-Security
    - X-Frame-Options (not on docs pages)
    - Content-Security-Policy
    - X-Content-Type-Options
    - Referrer-Policy
    - Permissions-Policy
    """

    def __init__(
        self,
        app: ASGIApp,
        hsts_max_age: int = 31536000,  # 1 year
        include_subdomains: bool = True,
        preload: bool = False,
    ) -> None:
        super().__init__(app)
        hsts = f"max-age={hsts_max_age}"
        if include_subdomains:
            hsts += "; includeSubDomains"
        if preload:
            hsts += "; preload"
        self.hsts_value = hsts

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        is_docs_path = request.url.path in DOCS_PATHS

        response.headers["Strict-Transport-Security"] = self.hsts_value
        if not is_docs_path:
            response.headers["X-Frame-Options"] = "DENY"
        response.headers["Content-Security-Policy"] = _DOCS_CSP if is_docs_path else _API_CSP
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Permissions-Policy"] = _PERMISSIONS_POLICY

        return response
