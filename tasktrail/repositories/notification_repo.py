"""
Notification repository.
"""
import uuid
from typing import List

from sqlmodel.ext.asyncio.session import AsyncSession

from tasktrail.models.notification import Notification
from tasktrail.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """Repository for Notification operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Notification, session)

    async def get_latest(self, user_id: uuid.UUID, limit: int) -> List[Notification]:
        """Most recent notifications for a user."""
        return await self.list(filters={"user_id": user_id}, limit=limit)

    async def count_unread(self, user_id: uuid.UUID) -> int:
        return await self.count(filters={"user_id": user_id, "read": False})
