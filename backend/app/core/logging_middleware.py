"""Request logging middleware."""

import json
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("claims.requests")

REQUEST_ID_HEADER = "X-Request-ID"


def _error_summary(body: bytes) -> str:
    """Pull message/error out of an error envelope, falling back to raw text."""
    text = body.decode("utf-8", errors="replace")
    try:
        payload = json.loads(text)
    except ValueError:
        payload = None

    if isinstance(payload, dict) and "message" in payload:
        summary = str(payload["message"])
        if payload.get("error"):
            summary = f"{summary}: {payload['error']}"
        if payload.get("outcome"):
            summary = f"{summary} [{payload['outcome']}]"
        return summary

    # Trim to a reasonable length for log readability
    if len(text) > 500:
        text = text[:500] + "..."
    return text


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with a request id, method, path, status, and duration.

    The id is taken from an incoming X-Request-ID header or generated, and
    echoed back on the response so a resubmission's two writes can be tied
    to the request that made them. For 4xx/5xx responses the error
    envelope's message is logged as well.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = (time.monotonic() - start) * 1000

        status = response.status_code
        method = request.method
        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"

        if status >= 400 and hasattr(response, "body_iterator"):
            # Read the body to include error detail in the log, then
            # reconstruct the response so the client still receives it.
            body_bytes = b""
            async for chunk in response.body_iterator:
                if isinstance(chunk, str):
                    body_bytes += chunk.encode("utf-8")
                else:
                    body_bytes += chunk

            log = logger.warning if status < 500 else logger.error
            log(
                "[%s] %s %s -> %d (%.0fms): %s",
                request_id,
                method,
                path,
                status,
                duration_ms,
                _error_summary(body_bytes),
            )

            response = Response(
                content=body_bytes,
                status_code=response.status_code,
                headers=dict(response.headers),
                media_type=response.media_type,
            )
        else:
            logger.info(
                "[%s] %s %s -> %d (%.0fms)", request_id, method, path, status, duration_ms
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
