"""
Project service - projects and their members. All writes are manager only.
"""
import logging
import uuid
from typing import List

from sqlmodel.ext.asyncio.session import AsyncSession

from tasktrail.core.exceptions import raise_not_found, raise_invalid_choice, raise_validation_error
from tasktrail.core.permissions import require_manager
from tasktrail.core.timeutils import to_utc
from tasktrail.models.activity import Actions, EntityTypes
from tasktrail.models.project import Project, ProjectStatus
from tasktrail.models.user import User
from tasktrail.repositories.project_repo import ProjectRepository, ProjectMemberRepository
from tasktrail.repositories.task_repo import TaskRepository
from tasktrail.repositories.user_repo import UserRepository
from tasktrail.schemas.project import ProjectCreate, ProjectUpdate, ProjectDetailResponse
from tasktrail.services.activity_service import ActivityService

logger = logging.getLogger(__name__)


class ProjectService:
    """Service for project operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.project_repo = ProjectRepository(session)
        self.member_repo = ProjectMemberRepository(session)
        self.task_repo = TaskRepository(session)
        self.user_repo = UserRepository(session)
        self.activity = ActivityService(session)

    async def get(self, project_id: uuid.UUID) -> Project:
        """Get a project by ID."""
        project = await self.project_repo.get(project_id)
        if not project:
            raise_not_found("Project", str(project_id))
        return project

    async def get_detail(self, project_id: uuid.UUID) -> ProjectDetailResponse:
        project = await self.get(project_id)
        detail = ProjectDetailResponse.model_validate(project)
        detail.member_ids = await self.member_repo.get_member_ids(project_id)
        return detail

    async def list(self) -> List[Project]:
        return await self.project_repo.list()

    async def create(self, user: User, project_data: ProjectCreate) -> Project:
        """Create a project with its initial members. Unknown member ids are skipped."""
        require_manager(user, "Only managers can create projects")
        actor_id = user.id

        data = project_data.model_dump(exclude={"member_ids"})
        data["start_date"] = to_utc(data["start_date"])
        data["due_date"] = to_utc(data["due_date"])
        data["creator_id"] = actor_id

        project = await self.project_repo.create(data)
        project_id, title = project.id, project.title

        members = await self.user_repo.get_many(project_data.member_ids)
        for member_id in [member.id for member in members]:
            await self.member_repo.add_member(project_id, member_id)
        logger.info(f"Project {project_id} created by {actor_id} with {len(members)} members")

        await self.activity.record(actor_id, Actions.CREATE_PROJECT, EntityTypes.PROJECT, project_id, details=title)
        return await self.get(project_id)

    async def update(self, user: User, project_id: uuid.UUID, project_data: ProjectUpdate) -> Project:
        require_manager(user, "Only managers can edit projects")
        await self.get(project_id)
        actor_id = user.id

        changes = project_data.model_dump(exclude_unset=True)
        if "status" in changes and changes["status"] is None:
            raise_validation_error("must not be null", "status")
        status = changes.get("status")
        if status is not None and status not in ProjectStatus.ALL:
            raise_invalid_choice("status", status, ProjectStatus.ALL)
        if "title" in changes and not changes["title"]:
            raise_validation_error("must not be empty", "title")
        for field in ("start_date", "due_date"):
            if field in changes:
                changes[field] = to_utc(changes[field])

        await self.project_repo.update(project_id, changes)
        await self.activity.record(
            actor_id, Actions.UPDATE_PROJECT, EntityTypes.PROJECT, project_id,
            details="Updated project details"
        )
        return await self.get(project_id)

    async def add_member(self, user: User, project_id: uuid.UUID, member_id: uuid.UUID) -> None:
        require_manager(user, "Only managers can change project members")
        await self.get(project_id)
        if not await self.user_repo.exists(member_id):
            raise_not_found("User", str(member_id))
        actor_id = user.id

        await self.member_repo.add_member(project_id, member_id)
        await self.activity.record(
            actor_id, Actions.ADD_MEMBER, EntityTypes.PROJECT, project_id,
            details=f"Added user {member_id} to project"
        )

    async def remove_member(self, user: User, project_id: uuid.UUID, member_id: uuid.UUID) -> None:
        require_manager(user, "Only managers can change project members")
        await self.get(project_id)
        actor_id = user.id

        removed = await self.member_repo.remove_member(project_id, member_id)
        if not removed:
            raise_not_found("Project member", str(member_id))
        await self.activity.record(
            actor_id, Actions.REMOVE_MEMBER, EntityTypes.PROJECT, project_id,
            details=f"Removed user {member_id} from project"
        )

    async def delete(self, user: User, project_id: uuid.UUID) -> None:
        """
        Delete a project.
        Its tasks are kept and detached; the log entry is written before anything is removed.
        """
        require_manager(user, "Only managers can delete projects")
        await self.get(project_id)
        actor_id = user.id

        await self.activity.record(
            actor_id, Actions.DELETE_PROJECT, EntityTypes.PROJECT, project_id,
            details=f"Deleted project {project_id}"
        )

        await self.task_repo.detach_project(project_id)
        await self.member_repo.delete_for_project(project_id)
        await self.project_repo.delete(project_id)
        logger.info(f"Project {project_id} deleted by {actor_id}")
