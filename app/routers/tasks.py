# =============================================================================
# app/routers/tasks.py - Task Status Endpoints
# =============================================================================
# Lets admins poll background email jobs (reminders, campaigns).
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Path
from pydantic import BaseModel

from app.dependencies import AdminJudge
from workers.celery_app import celery_app

logger = logging.getLogger(__name__)

router = APIRouter()


class TaskStatusResponse(BaseModel):
    """Response model for task status."""
    task_id: str
    status: str
    progress: int | None = None
    message: str | None = None
    result: dict | None = None
    error: str | None = None


class TaskSubmitResponse(BaseModel):
    """Response model for task submission."""
    task_id: str
    status: str
    message: str


@router.get("/{task_id}", response_model=TaskStatusResponse)
async def get_task_status(
    task_id: Annotated[str, Path(description="Celery task ID")],
    admin: AdminJudge,
):
    """
    Get the status of a background email job.

    - PENDING: Waiting in queue
    - PROGRESS: Sending (includes progress percentage)
    - SUCCESS: Done, result holds the send summary
    - FAILURE: Failed, error holds the message
    """
    result = celery_app.AsyncResult(task_id)
    response = TaskStatusResponse(task_id=task_id, status=result.status)

    if result.status == "PROGRESS":
        info = result.info or {}
        response.progress = info.get("percent", 0)
        response.message = info.get("message", "Sending...")
    elif result.status == "SUCCESS":
        response.result = result.result
        response.progress = 100
        response.message = "Complete"
    elif result.status == "FAILURE":
        response.error = str(result.result) if result.result else "Unknown error"
        response.message = "Failed"
    elif result.status == "PENDING":
        response.progress = 0
        response.message = "Waiting in queue..."

    return response
