"""
Task, comment and manager note schemas.
"""
import uuid
from typing import Optional, List, Dict
from datetime import datetime
from pydantic import BaseModel, Field

from tasktrail.models.task import TaskPriority, TaskClassification


class TaskCreate(BaseModel):
    """Create a new task."""
    title: str = Field(min_length=1)
    description: Optional[str] = None
    priority: str = TaskPriority.MEDIUM
    classification: str = TaskClassification.OTHER
    assignee_id: Optional[uuid.UUID] = None
    project_id: Optional[uuid.UUID] = None
    due_date: Optional[datetime] = None

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Prepare monthly report",
                "priority": "HIGH",
                "classification": "MONTHLY",
                "due_date": "2024-03-01T17:00:00Z"
            }
        }


class TaskUpdate(BaseModel):
    """
    Update an existing task.
    Only the fields present in the request body are changed.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    classification: Optional[str] = None
    status: Optional[str] = None
    assignee_id: Optional[uuid.UUID] = None
    project_id: Optional[uuid.UUID] = None
    due_date: Optional[datetime] = None


class TaskStatusUpdate(BaseModel):
    status: str


class TaskResponse(BaseModel):
    """Task response."""
    id: uuid.UUID
    project_id: Optional[uuid.UUID]
    title: str
    description: Optional[str]
    status: str
    priority: str
    classification: str
    creator_id: uuid.UUID
    assignee_id: Optional[uuid.UUID]
    due_date: Optional[datetime]
    completed_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TaskFilter(BaseModel):
    """Task filtering options."""
    status: Optional[str] = None
    priority: Optional[str] = None
    assignee_id: Optional[uuid.UUID] = None
    project_id: Optional[uuid.UUID] = None
    classification: Optional[str] = None


# Bulk operations
class BulkTaskIds(BaseModel):
    task_ids: List[uuid.UUID] = Field(min_length=1)


class BulkStatusUpdate(BulkTaskIds):
    status: str


class BulkReassign(BulkTaskIds):
    assignee_id: uuid.UUID


class BulkResult(BaseModel):
    affected: int


# Comments and notes
class CommentCreate(BaseModel):
    content: str = Field(min_length=1)


class CommentResponse(BaseModel):
    id: uuid.UUID
    task_id: uuid.UUID
    author_id: uuid.UUID
    content: str
    created_at: datetime

    class Config:
        from_attributes = True


class NoteCreate(BaseModel):
    content: str = Field(min_length=1)


class NoteResponse(BaseModel):
    id: uuid.UUID
    task_id: uuid.UUID
    content: str
    created_at: datetime

    class Config:
        from_attributes = True


# Dashboard
class AssigneeLoad(BaseModel):
    """Open tasks currently held by one person."""
    user_id: uuid.UUID
    name: str
    count: int


class TaskCounts(BaseModel):
    """Task totals for the manager dashboard."""
    by_status: Dict[str, int] = {}
    by_assignee: List[AssigneeLoad] = []
