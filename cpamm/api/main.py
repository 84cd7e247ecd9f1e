"""FastAPI application exposing the pair registry."""

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from cpamm import __version__
from cpamm.api.endpoints import router
from cpamm.config import ServiceConfig, configure_logging
from cpamm.errors import AMMError

app = FastAPI(
    title="cpamm",
    description="Two-asset constant-product market maker",
    version=__version__,
)


@app.exception_handler(AMMError)
async def amm_error_handler(_request: Request, exc: AMMError) -> JSONResponse:
    """Named failure conditions are client errors."""
    return JSONResponse(status_code=400, content={"error": type(exc).__name__, "detail": str(exc)})


@app.exception_handler(ArithmeticError)
async def arithmetic_error_handler(_request: Request, exc: ArithmeticError) -> JSONResponse:
    """Arithmetic faults abort the call; state was already rolled back."""
    return JSONResponse(status_code=409, content={"error": type(exc).__name__, "detail": str(exc)})


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - CPAMM_HOST: Host to bind to (default: 0.0.0.0)
    - CPAMM_PORT: Port to bind to (default: 8000)
    - CPAMM_DEBUG: Enable reload mode (default: false)
    - CPAMM_LOG_LEVEL: Minimum log level (default: INFO)
    """
    config = ServiceConfig.from_env()
    configure_logging(config.log_level)
    uvicorn.run(
        "cpamm.api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
    )


if __name__ == "__main__":
    run()
