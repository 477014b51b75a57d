"""
Task service - task lifecycle, comments, notes and bulk operations.

Each mutation is committed first and then recorded in the activity log; the
two writes are separate and a failed log write never undoes the mutation.
"""
import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional, List, Sequence

from sqlmodel.ext.asyncio.session import AsyncSession

from tasktrail.config import settings
from tasktrail.core.exceptions import raise_not_found, raise_forbidden, raise_invalid_choice, raise_validation_error
from tasktrail.core.permissions import require_manager, can_edit_task
from tasktrail.core.timeutils import utcnow, to_utc
from tasktrail.models.activity import Actions, EntityTypes
from tasktrail.models.notification import NotificationTypes
from tasktrail.models.task import Task, TaskStatus, TaskPriority, TaskClassification, Comment, ManagerNote
from tasktrail.models.user import User
from tasktrail.repositories.project_repo import ProjectRepository
from tasktrail.repositories.task_repo import TaskRepository, CommentRepository, ManagerNoteRepository
from tasktrail.repositories.user_repo import UserRepository
from tasktrail.schemas.task import TaskCreate, TaskUpdate, TaskFilter, TaskCounts, AssigneeLoad
from tasktrail.services.activity_service import ActivityService
from tasktrail.services.impact_service import classify_completion
from tasktrail.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


def is_overdue(task: Task, now: Optional[datetime] = None) -> bool:
    """An open task whose due date has passed."""
    if not task.due_date or task.status == TaskStatus.COMPLETED:
        return False
    return to_utc(task.due_date) < to_utc(now or utcnow())


def _status_label(status: str) -> str:
    return status.replace("_", " ", 1)


class TaskService:
    """Service for task operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.task_repo = TaskRepository(session)
        self.comment_repo = CommentRepository(session)
        self.note_repo = ManagerNoteRepository(session)
        self.user_repo = UserRepository(session)
        self.project_repo = ProjectRepository(session)
        self.activity = ActivityService(session)
        self.notifications = NotificationService(session)

    # Validation helpers
    def _check_choice(self, field: str, value: Optional[str], allowed: Sequence[str]) -> None:
        if value is not None and value not in allowed:
            raise_invalid_choice(field, value, allowed)

    async def _check_refs(self, assignee_id: Optional[uuid.UUID], project_id: Optional[uuid.UUID]) -> None:
        if assignee_id and not await self.user_repo.exists(assignee_id):
            raise_not_found("User", str(assignee_id))
        if project_id and not await self.project_repo.exists(project_id):
            raise_not_found("Project", str(project_id))

    async def _user_name(self, user_id: Optional[uuid.UUID]) -> str:
        if user_id is None:
            return "Unassigned"
        user = await self.user_repo.get(user_id)
        return user.name if user else "Unknown"

    async def get(self, task_id: uuid.UUID) -> Task:
        """Get a task by ID."""
        task = await self.task_repo.get(task_id)
        if not task:
            raise_not_found("Task", str(task_id))
        return task

    async def list(self, filters: Optional[TaskFilter] = None, overdue_only: bool = False) -> List[Task]:
        """List tasks, newest first."""
        filters = filters or TaskFilter()
        tasks = await self.task_repo.list_filtered(**filters.model_dump())
        if overdue_only:
            now = utcnow()
            tasks = [task for task in tasks if is_overdue(task, now)]
        return tasks

    async def create(self, user: User, task_data: TaskCreate) -> Task:
        """Create a task and tell the assignee about it."""
        require_manager(user, "Only managers can create tasks")
        self._check_choice("priority", task_data.priority, TaskPriority.ALL)
        self._check_choice("classification", task_data.classification, TaskClassification.ALL)
        await self._check_refs(task_data.assignee_id, task_data.project_id)

        actor_id = user.id
        data = task_data.model_dump()
        data["due_date"] = to_utc(data["due_date"])
        data["creator_id"] = actor_id
        data["status"] = TaskStatus.NEW

        task = await self.task_repo.create(data)
        task_id, title, assignee_id = task.id, task.title, task.assignee_id
        logger.info(f"Task {task_id} created by {actor_id}")

        await self.activity.record(actor_id, Actions.CREATE_TASK, EntityTypes.TASK, task_id, details=title)

        if assignee_id and assignee_id != actor_id:
            await self.notifications.notify(
                assignee_id,
                NotificationTypes.ASSIGNMENT,
                f"You were assigned a new task: {title}",
                task_id
            )

        return await self.get(task_id)

    async def update(self, user: User, task_id: uuid.UUID, task_data: TaskUpdate) -> Task:
        """
        Update the fields present in task_data.
        One UPDATE_TASK entry is logged per field whose value actually changed.
        """
        task = await self.get(task_id)
        if not can_edit_task(user, task):
            raise_forbidden("Only a manager or the assignee can edit this task")

        changes = task_data.model_dump(exclude_unset=True)
        for field in ("status", "priority", "classification"):
            if field in changes and changes[field] is None:
                raise_validation_error("must not be null", field)
        self._check_choice("status", changes.get("status"), TaskStatus.ALL)
        self._check_choice("priority", changes.get("priority"), TaskPriority.ALL)
        self._check_choice("classification", changes.get("classification"), TaskClassification.ALL)
        if "title" in changes and not changes["title"]:
            raise_validation_error("must not be empty", "title")
        await self._check_refs(changes.get("assignee_id"), changes.get("project_id"))
        if "due_date" in changes:
            changes["due_date"] = to_utc(changes["due_date"])

        actor_id = user.id
        before = {field: getattr(task, field) for field in changes}
        if before.get("due_date") is not None:
            before["due_date"] = to_utc(before["due_date"])
        diff = {field: value for field, value in changes.items() if before[field] != value}
        if not diff:
            return task

        old_assignee = task.assignee_id
        due_date = diff.get("due_date", task.due_date)

        impact = None
        updates = dict(diff)
        if "status" in diff:
            now = utcnow()
            if diff["status"] == TaskStatus.COMPLETED:
                updates["completed_at"] = now
                impact = classify_completion(due_date, now)
            else:
                updates["completed_at"] = None

        task = await self.task_repo.update(task_id, updates)
        title, assignee_id = task.title, task.assignee_id
        logger.info(f"Task {task_id} updated by {actor_id}: {', '.join(diff)}")

        for field, new_value in diff.items():
            old_value = before[field]
            if field == "assignee_id":
                old_value = await self._user_name(old_value)
                new_value = await self._user_name(new_value)
            await self.activity.record(
                actor_id,
                Actions.UPDATE_TASK,
                EntityTypes.TASK,
                task_id,
                details=f"Updated {field}",
                field=field,
                old_value=old_value,
                new_value=new_value,
                impact=impact if field == "status" else None
            )

        if "assignee_id" in diff:
            if assignee_id and assignee_id != actor_id:
                await self.notifications.notify(
                    assignee_id,
                    NotificationTypes.ASSIGNMENT,
                    f'Task "{title}" was reassigned to you',
                    task_id
                )
            if old_assignee and old_assignee != actor_id:
                await self.notifications.notify(
                    old_assignee,
                    NotificationTypes.UPDATE,
                    f'Task "{title}" was reassigned',
                    task_id
                )

        if "due_date" in diff and assignee_id and assignee_id != actor_id:
            await self.notifications.notify(
                assignee_id,
                NotificationTypes.UPDATE,
                f'Deadline changed for "{title}"',
                task_id
            )

        return await self.get(task_id)

    async def update_status(self, user: User, task_id: uuid.UUID, status: str) -> Task:
        """Move a task to a new status, attaching the completion impact when it is COMPLETED."""
        self._check_choice("status", status, TaskStatus.ALL)
        task = await self.get(task_id)
        if not can_edit_task(user, task):
            raise_forbidden("Only a manager or the assignee can update this task")

        actor_id = user.id
        old_status, due_date = task.status, task.due_date

        now = utcnow()
        impact = None
        if status == TaskStatus.COMPLETED:
            impact = classify_completion(due_date, now)

        task = await self.task_repo.update(task_id, {
            "status": status,
            "completed_at": now if status == TaskStatus.COMPLETED else None,
        })
        title, creator_id = task.title, task.creator_id
        logger.info(f"Task {task_id} moved {old_status} -> {status} by {actor_id}")

        await self.activity.record(
            actor_id,
            Actions.UPDATE_STATUS,
            EntityTypes.TASK,
            task_id,
            details=f"Status updated to {status}",
            field="status",
            old_value=old_status,
            new_value=status,
            impact=impact
        )

        if creator_id != actor_id:
            await self.notifications.notify(
                creator_id,
                NotificationTypes.UPDATE,
                f'Task "{title}" status updated to {_status_label(status)}',
                task_id
            )

        return await self.get(task_id)

    async def delete(self, user: User, task_id: uuid.UUID) -> None:
        """Delete a task. The log entry is written first, while the title still resolves."""
        require_manager(user, "Only managers can delete tasks")
        await self.get(task_id)
        actor_id = user.id

        await self.activity.record(actor_id, Actions.DELETE_TASK, EntityTypes.TASK, task_id, details="Task deleted")

        await self.comment_repo.delete_for_tasks([task_id])
        await self.note_repo.delete_for_tasks([task_id])
        await self.task_repo.delete(task_id)
        logger.info(f"Task {task_id} deleted by {actor_id}")

    async def duplicate(self, user: User, task_id: uuid.UUID) -> Task:
        """Copy a task as a new unassigned task."""
        source = await self.get(task_id)
        actor_id = user.id

        copy = await self.task_repo.create({
            "title": f"{source.title} (Copy)",
            "description": source.description,
            "priority": source.priority,
            "classification": source.classification,
            "project_id": source.project_id,
            "due_date": source.due_date,
            "creator_id": actor_id,
            "status": TaskStatus.NEW,
            "assignee_id": None,
        })
        copy_id = copy.id

        await self.activity.record(
            actor_id, Actions.DUPLICATE_TASK, EntityTypes.TASK, copy_id,
            details=f"Duplicated from {task_id}"
        )
        return await self.get(copy_id)

    # Notes and comments
    async def add_note(self, user: User, task_id: uuid.UUID, content: str) -> ManagerNote:
        require_manager(user, "Only managers can add notes")
        await self.get(task_id)
        actor_id = user.id

        note = await self.note_repo.create({"task_id": task_id, "content": content})
        note_id = note.id
        await self.activity.record(actor_id, Actions.ADD_NOTE, EntityTypes.TASK, task_id, details="Manager note added")
        return await self.note_repo.get(note_id)

    async def list_notes(self, task_id: uuid.UUID) -> List[ManagerNote]:
        await self.get(task_id)
        return await self.note_repo.get_for_task(task_id)

    async def add_comment(self, user: User, task_id: uuid.UUID, content: str) -> Comment:
        """
        Comment on a task.
        The assignee is notified, and the creator too when they are someone else.
        """
        task = await self.get(task_id)
        actor_id = user.id
        title, assignee_id, creator_id = task.title, task.assignee_id, task.creator_id

        comment = await self.comment_repo.create({
            "task_id": task_id,
            "author_id": actor_id,
            "content": content,
        })
        comment_id = comment.id

        await self.activity.record(actor_id, Actions.ADD_COMMENT, EntityTypes.TASK, task_id, details="Comment added")

        message = f'New comment on "{title}"'
        if assignee_id and assignee_id != actor_id:
            await self.notifications.notify(assignee_id, NotificationTypes.COMMENT, message, task_id)
        if creator_id != actor_id and creator_id != assignee_id:
            await self.notifications.notify(creator_id, NotificationTypes.COMMENT, message, task_id)

        return await self.comment_repo.get(comment_id)

    async def list_comments(self, task_id: uuid.UUID) -> List[Comment]:
        await self.get(task_id)
        return await self.comment_repo.get_for_task(task_id)

    # Bulk operations
    async def bulk_delete(self, user: User, task_ids: List[uuid.UUID]) -> int:
        require_manager(user, "Only managers can run bulk actions")
        actor_id = user.id
        tasks = await self.task_repo.get_many(task_ids)
        found = [task.id for task in tasks]

        for task_id in found:
            await self.activity.record(actor_id, Actions.DELETE_TASK, EntityTypes.TASK, task_id, details="Bulk deleted")

        if not found:
            return 0
        await self.comment_repo.delete_for_tasks(found)
        await self.note_repo.delete_for_tasks(found)
        deleted = await self.task_repo.delete_many(found)
        logger.info(f"{deleted} tasks bulk deleted by {actor_id}")
        return deleted

    async def bulk_update_status(self, user: User, task_ids: List[uuid.UUID], status: str) -> int:
        """Set one status on many tasks; each task gets its own log entry and impact."""
        require_manager(user, "Only managers can run bulk actions")
        self._check_choice("status", status, TaskStatus.ALL)
        actor_id = user.id

        tasks = await self.task_repo.get_many(task_ids)
        snapshot = [(task.id, task.status, task.due_date) for task in tasks]
        if not snapshot:
            return 0

        now = utcnow()
        await self.task_repo.update_many([task_id for task_id, _, _ in snapshot], {
            "status": status,
            "completed_at": now if status == TaskStatus.COMPLETED else None,
        })

        for task_id, old_status, due_date in snapshot:
            impact = classify_completion(due_date, now) if status == TaskStatus.COMPLETED else None
            await self.activity.record(
                actor_id,
                Actions.UPDATE_STATUS,
                EntityTypes.TASK,
                task_id,
                details=f"Bulk status update to {status}",
                field="status",
                old_value=old_status,
                new_value=status,
                impact=impact
            )
        return len(snapshot)

    async def bulk_reassign(self, user: User, task_ids: List[uuid.UUID], assignee_id: uuid.UUID) -> int:
        require_manager(user, "Only managers can run bulk actions")
        assignee = await self.user_repo.get(assignee_id)
        if not assignee:
            raise_not_found("User", str(assignee_id))
        actor_id, assignee_name = user.id, assignee.name

        tasks = await self.task_repo.get_many(task_ids)
        snapshot = [(task.id, task.assignee_id) for task in tasks]
        if not snapshot:
            return 0

        await self.task_repo.update_many([task_id for task_id, _ in snapshot], {"assignee_id": assignee_id})

        for task_id, old_assignee in snapshot:
            await self.activity.record(
                actor_id,
                Actions.REASSIGN_TASK,
                EntityTypes.TASK,
                task_id,
                details="Bulk reassigned",
                field="assignee_id",
                old_value=await self._user_name(old_assignee),
                new_value=assignee_name
            )

        if assignee_id != actor_id:
            await self.notifications.notify(
                assignee_id,
                NotificationTypes.ASSIGNMENT,
                f"You were assigned {len(snapshot)} tasks"
            )
        return len(snapshot)

    # Dashboard queries
    async def upcoming_deadlines(self, days: Optional[int] = None) -> List[Task]:
        """Open tasks due within the next few days."""
        now = utcnow()
        horizon = now + timedelta(days=days if days is not None else settings.UPCOMING_DEADLINE_DAYS)
        return await self.task_repo.get_due_between(now, horizon)

    async def overdue(self) -> List[Task]:
        return await self.task_repo.get_overdue(utcnow())

    async def needing_review(self) -> List[Task]:
        return await self.task_repo.list(
            filters={"status": TaskStatus.UNDER_REVIEW},
            order_by="updated_at"
        )

    async def counts(self) -> TaskCounts:
        """Task totals per status, and open tasks per active team member."""
        by_status = {status: 0 for status in TaskStatus.ALL}
        for status, count in await self.task_repo.counts_by_status():
            by_status[status] = count

        open_counts = dict(await self.task_repo.counts_by_assignee())
        users = await self.user_repo.list_active()
        by_assignee = [
            AssigneeLoad(user_id=member.id, name=member.name, count=open_counts.get(member.id, 0))
            for member in users
        ]
        return TaskCounts(by_status=by_status, by_assignee=by_assignee)
