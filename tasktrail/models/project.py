"""
Project and project membership models.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from tasktrail.core.timeutils import utcnow, UTC_DATETIME


class ProjectStatus:
    ACTIVE = "ACTIVE"
    ON_HOLD = "ON_HOLD"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"

    ALL = (ACTIVE, ON_HOLD, COMPLETED, ARCHIVED)


class Project(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    title: str = Field(index=True)
    description: Optional[str] = None
    status: str = Field(default=ProjectStatus.ACTIVE, index=True)
    priority: Optional[str] = None

    start_date: Optional[datetime] = Field(default=None, sa_type=UTC_DATETIME)
    due_date: Optional[datetime] = Field(default=None, sa_type=UTC_DATETIME)

    creator_id: uuid.UUID = Field(foreign_key="user.id", index=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTC_DATETIME)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTC_DATETIME)


class ProjectMember(SQLModel, table=True):
    """
    Junction table for Project-User assignment.
    """
    __tablename__ = "project_member"

    project_id: uuid.UUID = Field(foreign_key="project.id", primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="user.id", primary_key=True)
    joined_at: datetime = Field(default_factory=utcnow, sa_type=UTC_DATETIME)
