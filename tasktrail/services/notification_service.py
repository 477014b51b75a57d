"""
Notification service - in-app notifications, polled by the client.
"""
import logging
import uuid
from typing import Optional, List

from sqlmodel.ext.asyncio.session import AsyncSession

from tasktrail.config import settings
from tasktrail.core.exceptions import raise_not_found, raise_forbidden
from tasktrail.database import rollback_quietly
from tasktrail.models.notification import Notification
from tasktrail.models.user import User
from tasktrail.repositories.notification_repo import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    """Service for notification operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.notification_repo = NotificationRepository(session)

    async def notify(
        self,
        user_id: uuid.UUID,
        type: str,
        message: str,
        related_entity_id: Optional[uuid.UUID] = None
    ) -> None:
        """Create a notification. Failures are logged, never raised."""
        try:
            await self.notification_repo.create({
                "user_id": user_id,
                "type": type,
                "message": message,
                "task_id": related_entity_id,
                "read": False,
            })
            logger.info(f"Notification to {user_id}: {message}")
        except Exception:
            logger.exception(f"Failed to create notification for {user_id}")
            await rollback_quietly(self.session)

    async def list_for_user(self, user_id: uuid.UUID, limit: Optional[int] = None) -> List[Notification]:
        """Latest notifications for the user, newest first."""
        return await self.notification_repo.get_latest(user_id, limit or settings.NOTIFICATION_FEED_LIMIT)

    async def count_unread(self, user_id: uuid.UUID) -> int:
        return await self.notification_repo.count_unread(user_id)

    async def mark_read(self, notification_id: uuid.UUID, user: User) -> Notification:
        """Mark one of the user's notifications as read."""
        notification = await self.notification_repo.get(notification_id)
        if not notification:
            raise_not_found("Notification", str(notification_id))
        if notification.user_id != user.id:
            raise_forbidden("Not your notification")
        return await self.notification_repo.update(notification_id, {"read": True})
