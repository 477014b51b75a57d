"""
User repository.
"""
from typing import Optional, List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from tasktrail.models.user import User, Roles
from tasktrail.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email. Emails are stored lower-cased."""
        return await self.get_by_field("email", email.lower())

    async def list_active(self) -> List[User]:
        query = select(User).where(User.is_active == True).order_by(User.name)  # noqa: E712
        result = await self.session.exec(query)
        return result.all()

    async def list_managers(self) -> List[User]:
        query = select(User).where(
            User.role == Roles.MANAGER,
            User.is_active == True  # noqa: E712
        )
        result = await self.session.exec(query)
        return result.all()
