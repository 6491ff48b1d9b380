"""FastAPI application exposing read-only views of the market."""

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pairswap import __version__
from pairswap.api.endpoints import router
from pairswap.config import PairswapConfig
from pairswap.logging_config import configure_logging

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024

app = FastAPI(
    title="Pairswap",
    description="Constant-product exchange core: pair state and route quotes",
    version=__version__,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the API server.

    Configuration via PAIRSWAP_* environment variables (see PairswapConfig.from_env).
    """
    config = PairswapConfig.from_env()
    configure_logging(config.log_level, json=config.log_json)
    uvicorn.run(
        "pairswap.api.main:app",
        host=config.api_host,
        port=config.api_port,
        reload=config.api_reload,
    )


if __name__ == "__main__":
    run()
