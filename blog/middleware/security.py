# ----------------------
# file   : blog/middleware/security.py
# function: default security headers on every response (helmet defaults)
# ----------------------

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

DEFAULT_HEADERS = {
    "X-DNS-Prefetch-Control": "off",
    "X-Frame-Options": "SAMEORIGIN",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-Download-Options": "noopen",
    "X-Content-Type-Options": "nosniff",
    "X-XSS-Protection": "1; mode=block",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        # headers set by a handler are kept
        for name, value in DEFAULT_HEADERS.items():
            if name not in response.headers:
                response.headers[name] = value
        if "x-powered-by" in response.headers:
            del response.headers["x-powered-by"]
        return response
