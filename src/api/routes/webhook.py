"""Webhook endpoint that receives design token CSS from the Figma plugin.

Supports:
- POST /webhook/figma-tokens - Queue a token update (raw text/plain CSS body)
- GET /webhook/jobs/{request_id} - Poll the status of a queued update
"""

import logging

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from src.api.schemas.responses import JobStatusResponse, WebhookResponse
from src.api.services.job_queue import enqueue_job, get_job_status
from src.config.settings import get_settings
from src.utils.error_handling import ConfigurationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhook", tags=["webhook"])


def _error_response(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=WebhookResponse(success=False, error=error).model_dump(exclude_none=True),
    )


@router.post("/figma-tokens", response_model=WebhookResponse)
async def receive_figma_tokens(
    request: Request,
    test: bool = Query(False, description="Skip pull request creation for this update"),
):
    """Accept a CSS document and queue it for merging.

    Responds as soon as the update is queued; the merge, commit and pull
    request happen in the background worker.

    Args:
        request: Incoming request with the CSS as a raw body
        test: Enable test mode for this update

    Returns:
        WebhookResponse with the request ID to poll
    """
    try:
        settings = get_settings()
    except ConfigurationError as e:
        logger.error(f"Webhook rejected, configuration invalid: {e}")
        return _error_response(500, str(e))

    body = await request.body()

    max_bytes = settings.api.max_body_mb * 1024 * 1024
    if len(body) > max_bytes:
        return _error_response(413, f"CSS content exceeds {settings.api.max_body_mb} MB limit")

    try:
        css = body.decode("utf-8")
    except UnicodeDecodeError:
        return _error_response(400, "Invalid request: CSS content must be UTF-8 text")

    if not css.strip():
        return _error_response(400, "Invalid request: CSS content is required")

    test_mode = test or settings.test_mode
    logger.info("Received CSS update", extra={"css_chars": len(css), "test_mode": test_mode})
    if test_mode:
        logger.warning("Test mode enabled, PR creation will be skipped")

    request_id = await enqueue_job(css, test_mode=test_mode)

    return WebhookResponse(
        success=True,
        message="Design tokens update queued for processing",
        request_id=request_id,
    )


@router.get("/jobs/{request_id}", response_model=JobStatusResponse)
async def job_status(request_id: str) -> JobStatusResponse:
    """Get the status of a queued token update.

    Raises:
        HTTPException: 404 if the request ID is unknown
    """
    job = get_job_status(request_id)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Job not found: {request_id}")

    return JobStatusResponse(
        request_id=request_id,
        status=job["status"],
        test_mode=job.get("test_mode", False),
        queued_at=job.get("queued_at"),
        started_at=job.get("started_at"),
        completed_at=job.get("completed_at"),
        result=job.get("result"),
        error=job.get("error"),
    )
