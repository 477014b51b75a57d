"""
Activity service - records every mutating action in the activity log.
"""
import logging
import uuid
from datetime import datetime
from typing import Optional, List, Any

from sqlmodel.ext.asyncio.session import AsyncSession

from tasktrail.core.timeutils import to_utc
from tasktrail.database import rollback_quietly
from tasktrail.models.activity import ActivityLog, EntityTypes
from tasktrail.repositories.activity_repo import ActivityLogRepository
from tasktrail.repositories.project_repo import ProjectRepository
from tasktrail.repositories.task_repo import TaskRepository
from tasktrail.schemas.activity import Impact, serialize_details

logger = logging.getLogger(__name__)


def as_log_value(value: Any) -> Optional[str]:
    """Render a field value for the old_value/new_value columns."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_utc(value).isoformat()
    return str(value)


class ActivityService:
    """
    Service for activity logging.

    Recording is best-effort: a failed write is logged and swallowed so the
    mutation that triggered it still succeeds.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.activity_repo = ActivityLogRepository(session)
        self.task_repo = TaskRepository(session)
        self.project_repo = ProjectRepository(session)

    async def record(
        self,
        actor_id: uuid.UUID,
        action: str,
        entity_type: str,
        entity_id: uuid.UUID,
        details: Optional[str] = None,
        field: Optional[str] = None,
        old_value: Any = None,
        new_value: Any = None,
        impact: Optional[Impact] = None
    ) -> None:
        """Append one log entry. Identical calls append identical rows."""
        try:
            if not details:
                details = await self._resolve_name(entity_type, entity_id)

            await self.activity_repo.log(
                user_id=actor_id,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                details=serialize_details(details, impact),
                field=field,
                old_value=as_log_value(old_value),
                new_value=as_log_value(new_value)
            )
        except Exception:
            logger.exception(f"Failed to log activity {action} on {entity_type} {entity_id}")
            await rollback_quietly(self.session)

    async def _resolve_name(self, entity_type: str, entity_id: uuid.UUID) -> Optional[str]:
        """Title of the affected entity, or a placeholder once it is gone."""
        if entity_type == EntityTypes.TASK:
            task = await self.task_repo.get(entity_id)
            return task.title if task else "Unknown Task"
        if entity_type == EntityTypes.PROJECT:
            project = await self.project_repo.get(entity_id)
            return project.title if project else "Unknown Project"
        return None

    async def get_by_entity(self, entity_type: str, entity_id: uuid.UUID) -> List[ActivityLog]:
        """Get activity for a specific entity."""
        return await self.activity_repo.get_by_entity(entity_type, entity_id)
