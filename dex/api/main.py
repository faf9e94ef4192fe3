"""FastAPI application for the ledger service.

Note: Authentication is intentionally not implemented at the application
level. The service trusts the ``provider`` / ``trader`` fields of each
request, which is only appropriate behind an authenticating gateway or for
local development against the in-memory token bank.
"""

import logging
import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from dex import __version__
from dex.api.endpoints import router
from dex.errors import (
    InsufficientLiquidity,
    InsufficientShares,
    InvalidInput,
    InvariantViolation,
    LedgerError,
    RatioMismatch,
    ReentrancyError,
    SlippageExceeded,
    TransferFailure,
)
from dex.models.api import ErrorResponse

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("DEX_HOST", "0.0.0.0")
PORT = int(os.environ.get("DEX_PORT", "8000"))
DEBUG = os.environ.get("DEX_DEBUG", "false").lower() in ("true", "1", "yes")
LOG_LEVEL = os.environ.get("DEX_LOG_LEVEL", "INFO").upper()

# HTTP status per ledger error; anything unlisted falls back to 400
ERROR_STATUS: dict[type[LedgerError], int] = {
    InvalidInput: 400,
    RatioMismatch: 409,
    InsufficientLiquidity: 409,
    SlippageExceeded: 409,
    InsufficientShares: 409,
    ReentrancyError: 409,
    TransferFailure: 502,
    InvariantViolation: 500,
}

logger = structlog.get_logger()

app = FastAPI(
    title="DEX Ledger",
    description="Constant product liquidity ledger",
    version=__version__,
)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    """Render a rejected ledger operation as a JSON error body."""
    status_code = ERROR_STATUS.get(type(exc), 400)
    logger.info(
        "request_rejected",
        path=request.url.path,
        error=type(exc).__name__,
        status_code=status_code,
    )
    body = ErrorResponse(error=type(exc).__name__, detail=str(exc))
    return JSONResponse(status_code=status_code, content=body.model_dump())


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Configure structlog for console output at the given level name."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level, logging.INFO)),
    )


def run() -> None:
    """Run the ledger API server.

    Configuration via environment variables:
    - DEX_HOST: Host to bind to (default: 0.0.0.0)
    - DEX_PORT: Port to bind to (default: 8000)
    - DEX_DEBUG: Enable debug/reload mode (default: false)
    - DEX_LOG_LEVEL: Log level name (default: INFO)
    - DEX_FEE_BPS: Swap fee in basis points (default: 30)
    """
    configure_logging()
    uvicorn.run(
        "dex.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
