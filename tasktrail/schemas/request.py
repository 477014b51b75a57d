"""
Work request schemas.
"""
import uuid
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field


class RequestCreate(BaseModel):
    """Raise a new request for the managers."""
    title: str = Field(min_length=1)
    description: Optional[str] = None
    is_urgent: bool = False
    due_date: Optional[datetime] = None


class RequestDecision(BaseModel):
    """Manager decision on a pending request."""
    status: str  # APPROVED or REJECTED
    comment: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "status": "APPROVED",
                "comment": "Go ahead"
            }
        }


class RequestResponse(BaseModel):
    """Request response."""
    id: uuid.UUID
    title: str
    description: Optional[str]
    is_urgent: bool
    due_date: Optional[datetime]
    status: str
    manager_comment: Optional[str]
    requester_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RequestDecisionResponse(BaseModel):
    request: RequestResponse
    task_id: Optional[uuid.UUID] = None
