"""FastAPI application for the pool service.

Pool errors are mapped to JSON responses ``{"error": ..., "detail": ...}``:
404 for unknown pools and tokens, 409 for lifecycle conflicts, 400 for
bound, limit and argument violations, 500 for numeric sanity failures.
"""

import logging
import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from bpool import __version__
from bpool.api.endpoints import router
from bpool.api.models import ErrorResponse
from bpool.api.registry import PoolAlreadyExists, PoolNotFound
from bpool.math import FixedPointError
from bpool.pool import (
    AlreadyFinalized,
    InvalidToken,
    MathApproximationError,
    NotFinalized,
    PoolError,
    TokenAlreadyBound,
)

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("BPOOL_HOST", "0.0.0.0")
PORT = int(os.environ.get("BPOOL_PORT", "8000"))
DEBUG = os.environ.get("BPOOL_DEBUG", "false").lower() in ("true", "1", "yes")

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024

NOT_FOUND_ERRORS = (PoolNotFound, InvalidToken)
CONFLICT_ERRORS = (NotFinalized, AlreadyFinalized, TokenAlreadyBound, PoolAlreadyExists)


def configure_logging(verbose: bool = False) -> None:
    """Configure structlog for the service."""
    log_level = logging.DEBUG if verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )


def status_for(err: Exception) -> int:
    """HTTP status code for an error raised by a pool operation."""
    if isinstance(err, NOT_FOUND_ERRORS):
        return 404
    if isinstance(err, CONFLICT_ERRORS):
        return 409
    if isinstance(err, (MathApproximationError, FixedPointError)):
        return 500
    return 400


def _error_response(err: Exception) -> JSONResponse:
    status_code = status_for(err)
    if status_code >= 500:
        logger.warning("pool_operation_failed", error=type(err).__name__, detail=str(err))
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=type(err).__name__, detail=str(err)).model_dump(),
    )


app = FastAPI(
    title="Weighted Pool Engine",
    description="Weighted constant-product pools with a protocol reserve skim",
    version=__version__,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length:
        try:
            size = int(content_length)
        except ValueError:
            return JSONResponse(
                status_code=400,
                content={"error": "InvalidContentLength", "detail": "Invalid Content-Length"},
            )
        if size > MAX_REQUEST_SIZE:
            return JSONResponse(
                status_code=413,
                content={"error": "RequestTooLarge", "detail": "Request too large"},
            )
    return await call_next(request)


@app.exception_handler(PoolError)
async def pool_error_handler(request: Request, err: PoolError) -> JSONResponse:
    return _error_response(err)


@app.exception_handler(FixedPointError)
async def fixed_point_error_handler(request: Request, err: FixedPointError) -> JSONResponse:
    return _error_response(err)


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, err: ValueError) -> JSONResponse:
    return _error_response(err)


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the pool API server.

    Configuration via environment variables:
    - BPOOL_HOST: Host to bind to (default: 0.0.0.0)
    - BPOOL_PORT: Port to bind to (default: 8000)
    - BPOOL_DEBUG: Enable debug logging and reload mode (default: false)
    """
    configure_logging(verbose=DEBUG)
    uvicorn.run(
        "bpool.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
