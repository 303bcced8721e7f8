"""API schemas for response models."""

from .responses import HealthResponse, JobStatusResponse, WebhookResponse

__all__ = [
    "HealthResponse",
    "JobStatusResponse",
    "WebhookResponse",
]
