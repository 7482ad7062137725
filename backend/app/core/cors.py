"""Cross-origin headers stamped on every response.

Starlette's CORSMiddleware only answers requests that carry an Origin
header. Browser and non-browser clients of the claim API both expect the
permissive headers on every response, error responses included.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.config import settings


def cors_headers(origin: str | None = None) -> dict[str, str]:
    """Headers for a response to a request from ``origin``."""
    if "*" in settings.cors_origins:
        allow_origin = "*"
    elif origin and origin in settings.cors_origins:
        allow_origin = origin
    else:
        allow_origin = settings.cors_origins[0] if settings.cors_origins else "null"

    headers = {"Access-Control-Allow-Origin": allow_origin}
    if settings.cors_allow_credentials:
        headers["Access-Control-Allow-Credentials"] = "true"
    return headers


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Add cross-origin headers unless an inner layer already set them."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        for name, value in cors_headers(request.headers.get("origin")).items():
            response.headers.setdefault(name, value)
        return response
