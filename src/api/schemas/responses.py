"""Response schemas for the API."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class WebhookResponse(BaseModel):
    """Response for the token webhook.

    Attributes:
        success: Whether the update was accepted for processing
        message: Human readable status
        request_id: ID for polling the job status
        error: Error description when not accepted
    """

    success: bool
    message: Optional[str] = None
    request_id: Optional[str] = None
    error: Optional[str] = None


class JobStatusResponse(BaseModel):
    """Status of a queued token update."""

    request_id: str
    status: str = Field(
        ...,
        description="Job status",
        pattern="^(pending|running|completed|error)$",
    )
    test_mode: bool = False
    queued_at: Optional[str] = None
    started_at: Optional[str] = None
    completed_at: Optional[str] = None
    result: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Workflow result (success, pr_url, no_changes, error)",
    )
    error: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    environment: str
    version: str
