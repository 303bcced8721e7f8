"""API routes."""

from src.api.routes.webhook import router as webhook_router

__all__ = [
    "webhook_router",
]
