"""In-memory job queue for design token updates.

The webhook responds as soon as a job is queued. A single background worker
runs jobs one at a time, which serializes the read-merge-write cycle against
the bot branch within this process.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from src.services.token_update_workflow import TokenUpdateWorkflow, WorkflowResult

logger = logging.getLogger(__name__)

# In-memory job tracking (request_id -> metadata)
jobs: Dict[str, Dict[str, Any]] = {}
job_queue: Optional[asyncio.Queue] = None

# Finished jobs stay pollable this long
JOB_RETENTION_MINUTES = 30


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _get_queue() -> asyncio.Queue:
    global job_queue
    if job_queue is None:
        job_queue = asyncio.Queue()
    return job_queue


async def enqueue_job(css: str, test_mode: bool = False) -> str:
    """Add an update job to the queue.

    Args:
        css: Incoming CSS document
        test_mode: Skip pull request handling for this job

    Returns:
        Request ID for polling the job status
    """
    request_id = uuid.uuid4().hex
    jobs[request_id] = {
        "status": "pending",
        "test_mode": test_mode,
        "css_chars": len(css),
        "queued_at": _now(),
    }
    await _get_queue().put((request_id, css, test_mode))
    logger.info("Enqueued token update job", extra={"request_id": request_id, "css_chars": len(css)})
    return request_id


def get_job_status(request_id: str) -> Optional[Dict[str, Any]]:
    """Get in-memory job status, or None if unknown."""
    return jobs.get(request_id)


async def process_job(request_id: str, css: str, test_mode: bool) -> WorkflowResult:
    """Run one update job and record its outcome.

    The workflow is blocking (HTTP and model calls), so it runs in a thread.
    """
    job = jobs.setdefault(request_id, {})
    job["status"] = "running"
    job["started_at"] = _now()

    workflow = TokenUpdateWorkflow(test_mode=test_mode)
    try:
        result = await asyncio.to_thread(workflow.process_update, css)
    finally:
        workflow.close()

    job["status"] = "completed" if result.success else "error"
    job["completed_at"] = _now()
    job["result"] = result.to_dict()

    if result.success:
        logger.info("Token update job complete", extra={"request_id": request_id, "url": result.pr_url})
    else:
        logger.error(f"Token update job failed: {result.error}", extra={"request_id": request_id})
    return result


def cleanup_stale_jobs(max_age_minutes: int = JOB_RETENTION_MINUTES) -> int:
    """Drop finished jobs older than the retention window.

    Pending and running jobs are never removed.

    Args:
        max_age_minutes: Max age since completion before cleanup

    Returns:
        Number of jobs cleaned up
    """
    cutoff = datetime.now(timezone.utc) - timedelta(minutes=max_age_minutes)

    stale_job_ids = [
        request_id
        for request_id, job in jobs.items()
        if job.get("status") in ("completed", "error")
        and job.get("completed_at")
        and datetime.fromisoformat(job["completed_at"]) < cutoff
    ]
    for request_id in stale_job_ids:
        del jobs[request_id]

    if stale_job_ids:
        logger.info(f"Cleaned up {len(stale_job_ids)} stale token update jobs")

    return len(stale_job_ids)


async def worker() -> None:
    """Background worker that processes jobs from the queue."""
    queue = _get_queue()
    logger.info("Job queue worker started")
    while True:
        try:
            request_id, css, test_mode = await queue.get()

            try:
                await process_job(request_id, css, test_mode)
            except Exception as e:
                jobs.setdefault(request_id, {})
                jobs[request_id]["status"] = "error"
                jobs[request_id]["error"] = str(e)
                jobs[request_id]["completed_at"] = _now()
                logger.error(f"Worker job failed: {e}", extra={"request_id": request_id}, exc_info=True)

            queue.task_done()
            cleanup_stale_jobs()

        except asyncio.CancelledError:
            logger.info("Job queue worker shutting down")
            break
        except Exception as e:
            logger.error(f"Worker loop error: {e}")


async def start_worker() -> asyncio.Task:
    """Start the background worker task.

    Returns:
        The worker task handle
    """
    return asyncio.create_task(worker())
