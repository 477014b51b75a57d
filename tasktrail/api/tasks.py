"""
Tasks API routes.
"""
import uuid
from typing import Optional, List
from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from tasktrail.database import get_session
from tasktrail.services.task_service import TaskService
from tasktrail.services.activity_service import ActivityService
from tasktrail.services.history_service import HistoryService
from tasktrail.models.activity import EntityTypes
from tasktrail.schemas.task import (
    TaskCreate, TaskUpdate, TaskStatusUpdate, TaskResponse, TaskFilter, TaskCounts,
    BulkTaskIds, BulkStatusUpdate, BulkReassign, BulkResult,
    CommentCreate, CommentResponse, NoteCreate, NoteResponse
)
from tasktrail.schemas.activity import ActivityEntry
from tasktrail.schemas.common import MessageResponse
from tasktrail.api.deps import get_current_user, get_current_manager
from tasktrail.models.user import User

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.post("/", response_model=TaskResponse, status_code=201)
async def create_task(
    task_data: TaskCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Create a new task."""
    task_service = TaskService(session)
    return await task_service.create(current_user, task_data)


@router.get("/", response_model=List[TaskResponse])
async def list_tasks(
    status: Optional[str] = None,
    priority: Optional[str] = None,
    assignee_id: Optional[uuid.UUID] = None,
    project_id: Optional[uuid.UUID] = None,
    classification: Optional[str] = None,
    overdue: bool = False,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """List tasks with filtering."""
    filters = TaskFilter(
        status=status,
        priority=priority,
        assignee_id=assignee_id,
        project_id=project_id,
        classification=classification
    )
    task_service = TaskService(session)
    return await task_service.list(filters, overdue_only=overdue)


# Dashboard views
@router.get("/upcoming", response_model=List[TaskResponse])
async def upcoming_deadlines(
    days: Optional[int] = Query(None, ge=1, le=90),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Open tasks due in the next few days."""
    task_service = TaskService(session)
    return await task_service.upcoming_deadlines(days)


@router.get("/overdue", response_model=List[TaskResponse])
async def overdue_tasks(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    task_service = TaskService(session)
    return await task_service.overdue()


@router.get("/review", response_model=List[TaskResponse])
async def review_queue(
    current_user: User = Depends(get_current_manager),
    session: AsyncSession = Depends(get_session)
):
    """Tasks waiting for a manager's review."""
    task_service = TaskService(session)
    return await task_service.needing_review()


@router.get("/counts", response_model=TaskCounts)
async def task_counts(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    task_service = TaskService(session)
    return await task_service.counts()


# Bulk operations
@router.post("/bulk/delete", response_model=BulkResult)
async def bulk_delete(
    payload: BulkTaskIds,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    task_service = TaskService(session)
    return {"affected": await task_service.bulk_delete(current_user, payload.task_ids)}


@router.post("/bulk/status", response_model=BulkResult)
async def bulk_status(
    payload: BulkStatusUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    task_service = TaskService(session)
    return {"affected": await task_service.bulk_update_status(current_user, payload.task_ids, payload.status)}


@router.post("/bulk/reassign", response_model=BulkResult)
async def bulk_reassign(
    payload: BulkReassign,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    task_service = TaskService(session)
    return {"affected": await task_service.bulk_reassign(current_user, payload.task_ids, payload.assignee_id)}


# Single task
@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Get a task by ID."""
    task_service = TaskService(session)
    return await task_service.get(task_id)


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: uuid.UUID,
    task_data: TaskUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Update a task."""
    task_service = TaskService(session)
    return await task_service.update(current_user, task_id, task_data)


@router.post("/{task_id}/status", response_model=TaskResponse)
async def update_task_status(
    task_id: uuid.UUID,
    payload: TaskStatusUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Move a task to a new status."""
    task_service = TaskService(session)
    return await task_service.update_status(current_user, task_id, payload.status)


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Delete a task."""
    task_service = TaskService(session)
    await task_service.delete(current_user, task_id)
    return {"message": "Task deleted"}


@router.post("/{task_id}/duplicate", response_model=TaskResponse, status_code=201)
async def duplicate_task(
    task_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    task_service = TaskService(session)
    return await task_service.duplicate(current_user, task_id)


@router.get("/{task_id}/activity", response_model=List[ActivityEntry])
async def task_activity(
    task_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Log entries recorded against a task, newest first."""
    activity_service = ActivityService(session)
    logs = await activity_service.get_by_entity(EntityTypes.TASK, task_id)
    return await HistoryService(session).build_entries(logs)


# Notes and comments
@router.get("/{task_id}/notes", response_model=List[NoteResponse])
async def list_notes(
    task_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    task_service = TaskService(session)
    return await task_service.list_notes(task_id)


@router.post("/{task_id}/notes", response_model=NoteResponse, status_code=201)
async def add_note(
    task_id: uuid.UUID,
    payload: NoteCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Add a manager note to a task."""
    task_service = TaskService(session)
    return await task_service.add_note(current_user, task_id, payload.content)


@router.get("/{task_id}/comments", response_model=List[CommentResponse])
async def list_comments(
    task_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    task_service = TaskService(session)
    return await task_service.list_comments(task_id)


@router.post("/{task_id}/comments", response_model=CommentResponse, status_code=201)
async def add_comment(
    task_id: uuid.UUID,
    payload: CommentCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Comment on a task."""
    task_service = TaskService(session)
    return await task_service.add_comment(current_user, task_id, payload.content)
