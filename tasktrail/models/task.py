"""
Task, comment and manager note models.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from tasktrail.core.timeutils import utcnow, UTC_DATETIME


class TaskStatus:
    NEW = "NEW"
    IN_PROGRESS = "IN_PROGRESS"
    UNDER_REVIEW = "UNDER_REVIEW"
    COMPLETED = "COMPLETED"

    ALL = (NEW, IN_PROGRESS, UNDER_REVIEW, COMPLETED)


class TaskPriority:
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"

    ALL = (LOW, MEDIUM, HIGH, URGENT)


class TaskClassification:
    MONTHLY = "MONTHLY"
    OTHER = "OTHER"

    ALL = (MONTHLY, OTHER)


class Task(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    project_id: Optional[uuid.UUID] = Field(default=None, foreign_key="project.id", index=True)

    title: str
    description: Optional[str] = None
    status: str = Field(default=TaskStatus.NEW, index=True)
    priority: str = Field(default=TaskPriority.MEDIUM)
    classification: str = Field(default=TaskClassification.OTHER)

    creator_id: uuid.UUID = Field(foreign_key="user.id", index=True)
    assignee_id: Optional[uuid.UUID] = Field(default=None, foreign_key="user.id", index=True)

    due_date: Optional[datetime] = Field(default=None, index=True, sa_type=UTC_DATETIME)
    completed_at: Optional[datetime] = Field(default=None, sa_type=UTC_DATETIME)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTC_DATETIME)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTC_DATETIME)


class Comment(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    task_id: uuid.UUID = Field(foreign_key="task.id", index=True)
    author_id: uuid.UUID = Field(foreign_key="user.id")
    content: str
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTC_DATETIME)


class ManagerNote(SQLModel, table=True):
    __tablename__ = "manager_note"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    task_id: uuid.UUID = Field(foreign_key="task.id", index=True)
    content: str
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTC_DATETIME)
