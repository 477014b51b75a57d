"""
Project and project membership repositories.
"""
import uuid
from typing import Optional, List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from tasktrail.models.project import Project, ProjectMember
from tasktrail.repositories.base import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    """Repository for Project operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Project, session)

    async def get_for_member(self, user_id: uuid.UUID) -> List[Project]:
        """Projects the user has been added to."""
        query = select(Project).join(
            ProjectMember, ProjectMember.project_id == Project.id
        ).where(
            ProjectMember.user_id == user_id
        ).order_by(Project.created_at.desc())
        result = await self.session.exec(query)
        return result.all()


class ProjectMemberRepository(BaseRepository[ProjectMember]):
    """Repository for ProjectMember (junction table) operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(ProjectMember, session)

    async def get_membership(
        self,
        project_id: uuid.UUID,
        user_id: uuid.UUID
    ) -> Optional[ProjectMember]:
        """Get specific membership record."""
        return await self.session.get(ProjectMember, (project_id, user_id))

    async def get_member_ids(self, project_id: uuid.UUID) -> List[uuid.UUID]:
        query = select(ProjectMember.user_id).where(ProjectMember.project_id == project_id)
        result = await self.session.exec(query)
        return result.all()

    async def add_member(self, project_id: uuid.UUID, user_id: uuid.UUID) -> ProjectMember:
        """Create a membership, returning the existing one if already present."""
        membership = await self.get_membership(project_id, user_id)
        if membership:
            return membership
        return await self.create({"project_id": project_id, "user_id": user_id})

    async def remove_member(self, project_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        membership = await self.get_membership(project_id, user_id)
        if not membership:
            return False
        await self.session.delete(membership)
        await self.session.commit()
        return True

    async def delete_for_project(self, project_id: uuid.UUID) -> None:
        query = select(ProjectMember).where(ProjectMember.project_id == project_id)
        result = await self.session.exec(query)
        for membership in result.all():
            await self.session.delete(membership)
        await self.session.commit()
