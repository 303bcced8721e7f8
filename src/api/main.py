"""FastAPI application for Design Token Sync.

This module initializes the FastAPI app, its routes and the background
worker that processes queued token updates.
"""

import asyncio
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src import __version__
from src.api.routes import webhook_router
from src.api.schemas.responses import HealthResponse
from src.api.services.job_queue import start_worker
from src.config.settings import get_settings
from src.utils.error_handling import ConfigurationError
from src.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")


def configure_logging() -> None:
    """Configure logging from settings, falling back to defaults."""
    try:
        settings = get_settings()
    except ConfigurationError as e:
        setup_logging()
        logger.warning(f"Settings unavailable, using default logging: {e}")
        return

    log = settings.logging
    setup_logging(
        level=log.level,
        log_format=log.format,
        log_file=log.log_file or None,
        max_file_size_mb=log.max_file_size_mb,
        backup_count=log.backup_count,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown events."""
    configure_logging()
    logger.info(f"Starting Design Token Sync API (environment: {ENVIRONMENT})")
    worker_task = await start_worker()
    yield
    logger.info("Shutting down Design Token Sync API")
    worker_task.cancel()
    try:
        await worker_task
    except asyncio.CancelledError:
        pass


app = FastAPI(
    title="Design Token Sync API",
    description="Merge design token CSS from Figma into the repository stylesheet and open a pull request",
    version=__version__,
    lifespan=lifespan,
)

# Figma plugins post from a sandboxed iframe with a null origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(webhook_router)


@app.get("/")
async def root():
    """Root endpoint with service information."""
    return {
        "status": "ok",
        "message": "Design Token Sync",
        "version": __version__,
    }


@app.get("/api/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy", environment=ENVIRONMENT, version=__version__)
