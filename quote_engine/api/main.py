"""FastAPI application for the quote engine.

Note: Authentication and rate limiting are intentionally not implemented at
the application level. They belong to the infrastructure layer in front of
this service.
"""

import os

import structlog
import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from quote_engine import __version__
from quote_engine.api.endpoints import get_engine, router
from quote_engine.engine import QuoteEngine
from quote_engine.errors import (
    InsufficientLiquidity,
    PoolNotInitialized,
    QuoteEngineError,
    RpcUnavailable,
    ValidationError,
)
from quote_engine.models.api import ErrorDetail, ErrorResponse

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("QUOTE_ENGINE_HOST", "0.0.0.0")
PORT = int(os.environ.get("QUOTE_ENGINE_PORT", "8000"))
DEBUG = os.environ.get("QUOTE_ENGINE_DEBUG", "false").lower() in ("true", "1", "yes")

# HTTP status per error family; anything else is a 500
ERROR_STATUS_CODES: list[tuple[type[QuoteEngineError], int]] = [
    (ValidationError, 400),
    (PoolNotInitialized, 404),
    (InsufficientLiquidity, 409),
    (RpcUnavailable, 503),
]

app = FastAPI(
    title="AMM Quote Engine",
    description="Pool identification, price conversion and approximate swap quotes",
    version=__version__,
)


def status_code_for(error: QuoteEngineError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return 500


@app.exception_handler(QuoteEngineError)
async def handle_engine_error(request: Request, exc: QuoteEngineError) -> JSONResponse:
    """Render engine errors as ``{"success": false, "error": {code, message}}``."""
    status_code = status_code_for(exc)
    log = logger.warning if status_code < 500 else logger.error
    log(
        "request_failed",
        path=request.url.path,
        method=request.method,
        status_code=status_code,
        code=exc.code,
        error=str(exc),
    )
    body = ErrorResponse(error=ErrorDetail(code=exc.code, message=str(exc)))
    return JSONResponse(status_code=status_code, content=body.model_dump())


app.include_router(router)


@app.get("/health")
async def health(engine: QuoteEngine = Depends(get_engine)) -> dict[str, object]:
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": __version__,
        "rpc_configured": engine.rpc is not None,
        "cached_entries": len(engine.cache),
    }


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - QUOTE_ENGINE_HOST: Host to bind to (default: 0.0.0.0)
    - QUOTE_ENGINE_PORT: Port to bind to (default: 8000)
    - QUOTE_ENGINE_DEBUG: Enable debug/reload mode (default: false)
    Engine settings are read by EngineConfig.from_env().
    """
    uvicorn.run(
        "quote_engine.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
