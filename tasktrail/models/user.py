"""
User model.
Every team member is either a MANAGER or a MEMBER; permissions hang off that role.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from tasktrail.core.timeutils import utcnow, UTC_DATETIME


class Roles:
    MANAGER = "MANAGER"
    MEMBER = "MEMBER"

    ALL = (MANAGER, MEMBER)


class User(SQLModel, table=True):
    """
    User model with profile info and team role.
    Login is by email only; there is no password column.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    # Auth
    email: str = Field(unique=True, index=True)

    # Profile
    name: str
    avatar_url: Optional[str] = None
    role: str = Field(default=Roles.MEMBER, index=True)  # MANAGER, MEMBER

    is_active: bool = Field(default=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTC_DATETIME)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTC_DATETIME)
