"""
Project schemas.
"""
import uuid
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field


class ProjectCreate(BaseModel):
    """Create a new project."""
    title: str = Field(min_length=1)
    description: Optional[str] = None
    priority: Optional[str] = None
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    member_ids: List[uuid.UUID] = []


class ProjectUpdate(BaseModel):
    """Update an existing project."""
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None


class ProjectMemberAdd(BaseModel):
    user_id: uuid.UUID


class ProjectResponse(BaseModel):
    """Project response."""
    id: uuid.UUID
    title: str
    description: Optional[str]
    status: str
    priority: Optional[str]
    start_date: Optional[datetime]
    due_date: Optional[datetime]
    creator_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProjectDetailResponse(ProjectResponse):
    """Project with its member ids."""
    member_ids: List[uuid.UUID] = []
