"""
User service - team member accounts.
"""
import logging
import uuid
from typing import List

from sqlmodel.ext.asyncio.session import AsyncSession

from tasktrail.core.exceptions import raise_not_found, raise_already_exists, raise_invalid_choice, raise_validation_error
from tasktrail.core.permissions import require_manager
from tasktrail.models.user import User, Roles
from tasktrail.repositories.user_repo import UserRepository
from tasktrail.schemas.user import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


class UserService:
    """Service for user operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)

    async def get_profile(self, user_id: uuid.UUID) -> User:
        """Get user profile."""
        user = await self.user_repo.get(user_id)
        if not user:
            raise_not_found("User", str(user_id))
        return user

    async def list(self) -> List[User]:
        """Active team members, by name."""
        return await self.user_repo.list_active()

    async def create(self, current_user: User, user_data: UserCreate) -> User:
        """Add a team member. Managers only."""
        require_manager(current_user, "Only managers can add team members")
        if user_data.role not in Roles.ALL:
            raise_invalid_choice("role", user_data.role, Roles.ALL)

        email = user_data.email.lower()
        if await self.user_repo.get_by_email(email):
            raise_already_exists("User", "email", email)

        data = user_data.model_dump()
        data["email"] = email
        user = await self.user_repo.create(data)
        logger.info(f"User {user.id} ({user.role}) added by {current_user.id}")
        return user

    async def update(self, current_user: User, user_id: uuid.UUID, user_data: UserUpdate) -> User:
        """Update a profile. Members may edit their own name and avatar; managers anything."""
        changes = user_data.model_dump(exclude_unset=True)
        if current_user.id != user_id or {"role", "is_active"} & changes.keys():
            require_manager(current_user, "Only managers can change other accounts or roles")
        for field in ("name", "role", "is_active"):
            if field in changes and changes[field] is None:
                raise_validation_error("must not be null", field)
        if changes.get("role") is not None and changes["role"] not in Roles.ALL:
            raise_invalid_choice("role", changes["role"], Roles.ALL)

        user = await self.user_repo.update(user_id, changes)
        if not user:
            raise_not_found("User", str(user_id))
        return user
