"""FastAPI application entry point."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1.router import api_router
from app.config import settings
from app.core.cors import CORSHeadersMiddleware, cors_headers
from app.core.errors import ClaimChainError
from app.core.logging_middleware import RequestLoggingMiddleware
from app.services.chain_resolver import CHAIN_ERROR_MESSAGE
from app.services.resubmission import REGENERATE_ERROR_MESSAGE

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    description="Versioned timesheet claims: resubmission and revision chains",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

# Middleware (last added runs outermost)
app.add_middleware(CORSHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ClaimChainError)
async def claim_chain_error_handler(request: Request, exc: ClaimChainError) -> JSONResponse:
    """Render domain errors as {message[, error]} envelopes."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


def _operation_error_message(path: str) -> str:
    """The 500 message of the claim operation serving ``path``."""
    claims_prefix = f"{settings.api_v1_prefix}/claims"
    if path.startswith(f"{claims_prefix}/resubmit"):
        return REGENERATE_ERROR_MESSAGE
    if path.startswith(f"{claims_prefix}/chain"):
        return CHAIN_ERROR_MESSAGE
    return "Internal server error"


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort 500 envelope.

    Runs outside the middleware stack, so it sets the CORS headers itself.
    """
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "message": _operation_error_message(request.url.path),
            "error": str(exc),
        },
        headers=cors_headers(request.headers.get("origin")),
    )


# Include API routes
app.include_router(api_router, prefix=settings.api_v1_prefix)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
