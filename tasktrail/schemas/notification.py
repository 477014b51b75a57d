"""
Notification schemas.
"""
import uuid
from typing import Optional
from datetime import datetime
from pydantic import BaseModel


class NotificationResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    type: str
    message: str
    task_id: Optional[uuid.UUID]
    read: bool
    created_at: datetime

    class Config:
        from_attributes = True
