"""
Work requests raised by team members and decided by a manager.
An approved request becomes a task assigned back to the requester.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from tasktrail.core.timeutils import utcnow, UTC_DATETIME


class RequestStatus:
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    DECISIONS = (APPROVED, REJECTED)


class Request(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    title: str
    description: Optional[str] = None
    is_urgent: bool = Field(default=False)
    due_date: Optional[datetime] = Field(default=None, sa_type=UTC_DATETIME)

    status: str = Field(default=RequestStatus.PENDING, index=True)
    manager_comment: Optional[str] = None

    requester_id: uuid.UUID = Field(foreign_key="user.id", index=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTC_DATETIME)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTC_DATETIME)
