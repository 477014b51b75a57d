"""
History service - audit log views and statistics for the history pages.
"""
import logging
import math
import uuid
from datetime import datetime, timedelta
from typing import Optional, List, Sequence

from sqlmodel.ext.asyncio.session import AsyncSession

from tasktrail.config import settings
from tasktrail.core.exceptions import raise_not_found
from tasktrail.core.permissions import is_manager
from tasktrail.core.timeutils import utcnow, to_utc
from tasktrail.database import rollback_quietly
from tasktrail.models.activity import ActivityLog
from tasktrail.models.task import Task, TaskStatus, TaskClassification
from tasktrail.models.user import User
from tasktrail.repositories.activity_repo import ActivityLogRepository
from tasktrail.repositories.project_repo import ProjectRepository
from tasktrail.repositories.task_repo import TaskRepository
from tasktrail.repositories.user_repo import UserRepository
from tasktrail.schemas.activity import (
    ActivityEntry,
    CompletionMetrics,
    Contributor,
    HistoryStats,
    LogGroup,
)
from tasktrail.schemas.project import ProjectResponse
from tasktrail.schemas.task import TaskResponse
from tasktrail.schemas.user import UserHistoryProfile, UserResponse
from tasktrail.services.history_grouping import build_entry, filter_entries, group_entries, export_csv

logger = logging.getLogger(__name__)


def _percent(part: int, whole: int) -> int:
    # Half rounds up, not to even
    if not whole:
        return 0
    return int(math.floor(part * 100 / whole + 0.5))


def completion_metrics(tasks: Sequence[Task]) -> CompletionMetrics:
    """
    Delivery record over a user's tasks.
    A completed task with no due date counts as on time.
    """
    completed = [task for task in tasks if task.status == TaskStatus.COMPLETED]
    on_time = 0
    for task in completed:
        delivered = task.completed_at or task.updated_at
        if task.due_date is None or to_utc(delivered) <= to_utc(task.due_date):
            on_time += 1
    late = len(completed) - on_time

    return CompletionMetrics(
        completed=len(completed),
        on_time=on_time,
        late=late,
        on_time_rate=_percent(on_time, len(completed)),
        late_rate=_percent(late, len(completed)),
    )


class HistoryService:
    """Service for the audit trail and its aggregates. Never writes."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.activity_repo = ActivityLogRepository(session)
        self.user_repo = UserRepository(session)
        self.task_repo = TaskRepository(session)
        self.project_repo = ProjectRepository(session)

    async def build_entries(self, logs: Sequence[ActivityLog]) -> List[ActivityEntry]:
        """Resolve actors in one query and parse each row."""
        users = {user.id: user for user in await self.user_repo.get_many(log.user_id for log in logs)}
        return [build_entry(log, users.get(log.user_id)) for log in logs]

    async def list_entries(
        self,
        viewer: User,
        search: Optional[str] = None,
        user_id: Optional[uuid.UUID] = None
    ) -> List[ActivityEntry]:
        """
        Log entries the viewer may see, newest first, after filtering.
        Members see what they did plus everything on tasks assigned to them.
        """
        if is_manager(viewer):
            logs = await self.activity_repo.list_all()
        else:
            task_ids = await self.task_repo.get_assigned_ids(viewer.id)
            logs = await self.activity_repo.list_visible(viewer.id, task_ids)

        entries = await self.build_entries(logs)
        return filter_entries(entries, search=search, user_id=user_id)

    async def grouped(
        self,
        viewer: User,
        search: Optional[str] = None,
        user_id: Optional[uuid.UUID] = None
    ) -> List[LogGroup]:
        entries = await self.list_entries(viewer, search=search, user_id=user_id)
        window = timedelta(minutes=settings.HISTORY_GROUP_WINDOW_MINUTES)
        return group_entries(entries, window=window)

    async def export(
        self,
        viewer: User,
        search: Optional[str] = None,
        user_id: Optional[uuid.UUID] = None
    ) -> str:
        """CSV of the filtered log, one row per entry."""
        entries = await self.list_entries(viewer, search=search, user_id=user_id)
        return export_csv(entries)

    async def compute_stats(
        self,
        window_days: Optional[int] = None,
        now: Optional[datetime] = None
    ) -> HistoryStats:
        """
        Rolling window statistics for managers.

        Each figure is computed on its own; if one query fails it is logged and
        reported as zero (or empty) while the others are still returned.
        """
        if window_days is None:
            window_days = settings.HISTORY_WINDOW_DAYS
        now = to_utc(now) if now else utcnow()
        since = now - timedelta(days=window_days)
        stats = HistoryStats()

        try:
            stats.total_activities = await self.activity_repo.count_since(since)
        except Exception:
            logger.exception("Failed to count recent activity")
            await rollback_quietly(self.session)

        try:
            stats.top_contributors = await self._top_contributors(since)
        except Exception:
            logger.exception("Failed to rank contributors")
            await rollback_quietly(self.session)

        try:
            rows = await self.activity_repo.action_details_since(since)
            stats.late_completions = sum(
                1 for action, details in rows
                if "COMPLETE" in action and details and "LATE" in details
            )
        except Exception:
            logger.exception("Failed to count late completions")
            await rollback_quietly(self.session)

        return stats

    async def _top_contributors(self, since: datetime) -> List[Contributor]:
        ranked = await self.activity_repo.top_actors_since(since, settings.TOP_CONTRIBUTORS_LIMIT)
        users = {user.id: user for user in await self.user_repo.get_many(uid for uid, _ in ranked)}

        contributors = []
        for user_id, count in ranked:
            user = users.get(user_id)
            contributors.append(Contributor(
                user_id=user_id,
                name=user.name if user else "Unknown",
                avatar_url=user.avatar_url if user else None,
                count=count,
            ))
        return contributors

    async def get_user_profile(self, user_id: uuid.UUID) -> UserHistoryProfile:
        """Tasks, projects, own activity and delivery metrics for one user."""
        user = await self.user_repo.get(user_id)
        if not user:
            raise_not_found("User", str(user_id))

        tasks = await self.task_repo.get_by_assignee(user_id)
        projects = await self.project_repo.get_for_member(user_id)
        logs = await self.activity_repo.get_by_actor(user_id)

        return UserHistoryProfile(
            user=UserResponse.model_validate(user),
            monthly_tasks=[
                TaskResponse.model_validate(task) for task in tasks
                if task.classification == TaskClassification.MONTHLY
            ],
            other_tasks=[
                TaskResponse.model_validate(task) for task in tasks
                if task.classification != TaskClassification.MONTHLY
            ],
            projects=[ProjectResponse.model_validate(project) for project in projects],
            activity=await self.build_entries(logs),
            metrics=completion_metrics(tasks),
        )
