"""FastAPI application exposing the orchestration core."""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from dex_client import __version__
from dex_client.api.endpoints import router
from dex_client.log_config import configure_logging

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("DEX_HOST", "127.0.0.1")
PORT = int(os.environ.get("DEX_PORT", "8000"))
DEBUG = os.environ.get("DEX_DEBUG", "false").lower() in ("true", "1", "yes")

app = FastAPI(
    title="DEX client",
    description="Swap, liquidity and allowance orchestration for a constant-product AMM",
    version=__version__,
)

app.include_router(router)


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures with traceback and answer with a JSON 500."""
    logger.exception("unhandled_error", path=request.url.path, method=request.method)
    return JSONResponse(status_code=500, content={"error": "internal_error", "detail": str(exc)})


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok"}


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - DEX_HOST: Host to bind to (default: 127.0.0.1)
    - DEX_PORT: Port to bind to (default: 8000)
    - DEX_DEBUG: Enable debug logging and reload mode (default: false)
    - DEX_* contract settings, see DexConfig.from_env()
    """
    configure_logging(verbose=DEBUG)
    uvicorn.run(
        "dex_client.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
