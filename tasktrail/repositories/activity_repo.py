"""
Activity log repository.
"""
import uuid
from typing import Optional, List, Iterable, Tuple
from datetime import datetime

from sqlmodel import select, or_
from sqlmodel.ext.asyncio.session import AsyncSession

from tasktrail.models.activity import ActivityLog, EntityTypes
from tasktrail.repositories.base import BaseRepository


class ActivityLogRepository(BaseRepository[ActivityLog]):
    """Repository for ActivityLog operations. Rows are only ever inserted."""

    def __init__(self, session: AsyncSession):
        super().__init__(ActivityLog, session)

    async def log(
        self,
        user_id: uuid.UUID,
        action: str,
        entity_type: str,
        entity_id: uuid.UUID,
        details: Optional[str] = None,
        field: Optional[str] = None,
        old_value: Optional[str] = None,
        new_value: Optional[str] = None
    ) -> ActivityLog:
        """Create an activity log entry."""
        activity = ActivityLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            field=field,
            old_value=old_value,
            new_value=new_value,
            task_id=entity_id if entity_type == EntityTypes.TASK else None,
            project_id=entity_id if entity_type == EntityTypes.PROJECT else None
        )
        self.session.add(activity)
        await self.session.commit()
        await self.session.refresh(activity)
        return activity

    async def list_all(self) -> List[ActivityLog]:
        """Whole log, most recent first."""
        query = select(ActivityLog).order_by(ActivityLog.created_at.desc())
        result = await self.session.exec(query)
        return result.all()

    async def list_visible(
        self,
        user_id: uuid.UUID,
        task_ids: Iterable[uuid.UUID]
    ) -> List[ActivityLog]:
        """Entries a member may see: their own, plus those on tasks assigned to them."""
        task_ids = list(task_ids)
        condition = ActivityLog.user_id == user_id
        if task_ids:
            condition = or_(condition, ActivityLog.task_id.in_(task_ids))
        query = select(ActivityLog).where(condition).order_by(ActivityLog.created_at.desc())
        result = await self.session.exec(query)
        return result.all()

    async def get_by_actor(self, user_id: uuid.UUID, limit: Optional[int] = None) -> List[ActivityLog]:
        """Get activity by a specific user."""
        query = select(ActivityLog).where(
            ActivityLog.user_id == user_id
        ).order_by(ActivityLog.created_at.desc())
        if limit:
            query = query.limit(limit)
        result = await self.session.exec(query)
        return result.all()

    async def get_by_entity(self, entity_type: str, entity_id: uuid.UUID) -> List[ActivityLog]:
        """Get activity for a specific entity."""
        query = select(ActivityLog).where(
            ActivityLog.entity_type == entity_type,
            ActivityLog.entity_id == entity_id
        ).order_by(ActivityLog.created_at.desc())
        result = await self.session.exec(query)
        return result.all()

    async def count_since(self, since: datetime) -> int:
        return await self.count(conditions=[ActivityLog.created_at >= since])

    async def top_actors_since(self, since: datetime, limit: int) -> List[Tuple[uuid.UUID, int]]:
        """(user_id, count) pairs for the busiest actors in the window."""
        return await self.group_by_count(
            "user_id",
            conditions=[ActivityLog.created_at >= since],
            limit=limit
        )

    async def action_details_since(self, since: datetime) -> List[Tuple[str, Optional[str]]]:
        """(action, raw details) of every entry in the window."""
        query = select(ActivityLog.action, ActivityLog.details).where(
            ActivityLog.created_at >= since
        )
        result = await self.session.exec(query)
        return [(row[0], row[1]) for row in result.all()]
