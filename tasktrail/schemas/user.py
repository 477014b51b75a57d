"""
User schemas.
"""
import uuid
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, EmailStr

from tasktrail.models.user import Roles
from tasktrail.schemas.activity import ActivityEntry, CompletionMetrics
from tasktrail.schemas.project import ProjectResponse
from tasktrail.schemas.task import TaskResponse


class UserCreate(BaseModel):
    """Add a team member."""
    email: EmailStr
    name: str
    role: str = Roles.MEMBER
    avatar_url: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "email": "faris@company.com",
                "name": "Faris",
                "role": "MEMBER"
            }
        }


class UserResponse(BaseModel):
    """User details response."""
    id: uuid.UUID
    email: str
    name: str
    avatar_url: Optional[str] = None
    role: str
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class UserUpdate(BaseModel):
    """Update user profile."""
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: Optional[str] = None
    is_active: Optional[bool] = None


class UserHistoryProfile(BaseModel):
    """Everything the per-user history page shows."""
    user: UserResponse
    monthly_tasks: List[TaskResponse] = []
    other_tasks: List[TaskResponse] = []
    projects: List[ProjectResponse] = []
    activity: List[ActivityEntry] = []
    metrics: CompletionMetrics
