import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from tasktrail.core.timeutils import utcnow, UTC_DATETIME


class NotificationTypes:
    ASSIGNMENT = "ASSIGNMENT"
    UPDATE = "UPDATE"
    COMMENT = "COMMENT"
    REQUEST = "REQUEST"
    REQUEST_UPDATE = "REQUEST_UPDATE"


class Notification(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="user.id", index=True)
    type: str
    message: str
    # Related task or request; not a foreign key so it survives deletion
    task_id: Optional[uuid.UUID] = None
    read: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTC_DATETIME, index=True)
