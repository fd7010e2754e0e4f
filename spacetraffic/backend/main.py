"""Space Traffic Model - FastAPI backend entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from spacetraffic import __version__
from spacetraffic.backend.models.schemas import HealthResponse
from spacetraffic.backend.routers import satellites
from spacetraffic.utils.config import get_settings

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    settings = get_settings()
    logger.info(
        "Space Traffic Model API starting up (cache file: %s)",
        settings.server_cache_file,
    )
    yield
    logger.info("Space Traffic Model API shutting down")


app = FastAPI(
    title="Space Traffic Model",
    description="Satellite catalog service for the orbital simulator",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.include_router(satellites.router, prefix="/api/satellites", tags=["Satellites"])


@app.get("/api/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(status="ok", service="Space Traffic Model")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("spacetraffic.backend.main:app", host="0.0.0.0", port=8000, reload=True)
