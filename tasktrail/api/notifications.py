"""
Notification API routes.
"""
import uuid
from typing import List
from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from tasktrail.database import get_session
from tasktrail.services.notification_service import NotificationService
from tasktrail.schemas.notification import NotificationResponse
from tasktrail.api.deps import get_current_user
from tasktrail.models.user import User

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("/", response_model=List[NotificationResponse])
async def list_notifications(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Latest notifications for the logged-in user."""
    notification_service = NotificationService(session)
    return await notification_service.list_for_user(current_user.id)


@router.get("/unread-count")
async def unread_count(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    notification_service = NotificationService(session)
    return {"unread": await notification_service.count_unread(current_user.id)}


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Mark a notification as read."""
    notification_service = NotificationService(session)
    return await notification_service.mark_read(notification_id, current_user)
