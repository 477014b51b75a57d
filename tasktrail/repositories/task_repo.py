"""
Task, comment and manager note repositories.
"""
import uuid
from typing import Optional, List, Tuple
from datetime import datetime

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from tasktrail.models.task import Task, TaskStatus, Comment, ManagerNote
from tasktrail.repositories.base import BaseRepository


class TaskRepository(BaseRepository[Task]):
    """Repository for Task operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Task, session)

    async def list_filtered(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        assignee_id: Optional[uuid.UUID] = None,
        project_id: Optional[uuid.UUID] = None,
        classification: Optional[str] = None
    ) -> List[Task]:
        """List tasks, most recently created first."""
        return await self.list(filters={
            "status": status,
            "priority": priority,
            "assignee_id": assignee_id,
            "project_id": project_id,
            "classification": classification,
        })

    async def get_assigned_ids(self, user_id: uuid.UUID) -> List[uuid.UUID]:
        """IDs of every task currently assigned to the user."""
        query = select(Task.id).where(Task.assignee_id == user_id)
        result = await self.session.exec(query)
        return result.all()

    async def get_by_assignee(self, user_id: uuid.UUID) -> List[Task]:
        return await self.list(filters={"assignee_id": user_id})

    async def get_due_between(self, start: datetime, end: datetime) -> List[Task]:
        """Open tasks whose due date falls in [start, end], soonest first."""
        query = select(Task).where(
            Task.due_date >= start,
            Task.due_date <= end,
            Task.status != TaskStatus.COMPLETED
        ).order_by(Task.due_date)
        result = await self.session.exec(query)
        return result.all()

    async def get_overdue(self, now: datetime) -> List[Task]:
        """Open tasks past their due date, most overdue first."""
        query = select(Task).where(
            Task.due_date < now,
            Task.status != TaskStatus.COMPLETED
        ).order_by(Task.due_date)
        result = await self.session.exec(query)
        return result.all()

    async def counts_by_status(self) -> List[Tuple[str, int]]:
        return await self.group_by_count("status")

    async def counts_by_assignee(self) -> List[Tuple[Optional[uuid.UUID], int]]:
        """Open task counts per assignee."""
        return await self.group_by_count(
            "assignee_id",
            conditions=[Task.assignee_id.is_not(None), Task.status != TaskStatus.COMPLETED]
        )

    async def detach_project(self, project_id: uuid.UUID) -> None:
        """Clear project_id on every task of a project about to be deleted."""
        tasks = await self.list(filters={"project_id": project_id})
        for task in tasks:
            task.project_id = None
            self.session.add(task)
        await self.session.commit()


class CommentRepository(BaseRepository[Comment]):
    """Repository for task comments."""

    def __init__(self, session: AsyncSession):
        super().__init__(Comment, session)

    async def get_for_task(self, task_id: uuid.UUID) -> List[Comment]:
        """Comments on a task, oldest first."""
        return await self.list(filters={"task_id": task_id}, order_desc=False)

    async def delete_for_tasks(self, task_ids: List[uuid.UUID]) -> None:
        query = select(Comment).where(Comment.task_id.in_(task_ids))
        result = await self.session.exec(query)
        for comment in result.all():
            await self.session.delete(comment)
        await self.session.commit()


class ManagerNoteRepository(BaseRepository[ManagerNote]):
    """Repository for manager notes."""

    def __init__(self, session: AsyncSession):
        super().__init__(ManagerNote, session)

    async def get_for_task(self, task_id: uuid.UUID) -> List[ManagerNote]:
        return await self.list(filters={"task_id": task_id})

    async def delete_for_tasks(self, task_ids: List[uuid.UUID]) -> None:
        query = select(ManagerNote).where(ManagerNote.task_id.in_(task_ids))
        result = await self.session.exec(query)
        for note in result.all():
            await self.session.delete(note)
        await self.session.commit()
