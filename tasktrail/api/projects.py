"""
Projects API routes.
"""
import uuid
from typing import List
from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from tasktrail.database import get_session
from tasktrail.services.project_service import ProjectService
from tasktrail.schemas.project import (
    ProjectCreate, ProjectUpdate, ProjectResponse, ProjectDetailResponse, ProjectMemberAdd
)
from tasktrail.schemas.common import MessageResponse
from tasktrail.api.deps import get_current_user
from tasktrail.models.user import User

router = APIRouter(prefix="/api/projects", tags=["projects"])


@router.post("/", response_model=ProjectResponse, status_code=201)
async def create_project(
    project_data: ProjectCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Create a new project."""
    project_service = ProjectService(session)
    return await project_service.create(current_user, project_data)


@router.get("/", response_model=List[ProjectResponse])
async def list_projects(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    project_service = ProjectService(session)
    return await project_service.list()


@router.get("/{project_id}", response_model=ProjectDetailResponse)
async def get_project(
    project_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Get a project with its members."""
    project_service = ProjectService(session)
    return await project_service.get_detail(project_id)


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: uuid.UUID,
    project_data: ProjectUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Update a project."""
    project_service = ProjectService(session)
    return await project_service.update(current_user, project_id, project_data)


@router.post("/{project_id}/members", response_model=MessageResponse)
async def add_member(
    project_id: uuid.UUID,
    payload: ProjectMemberAdd,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    project_service = ProjectService(session)
    await project_service.add_member(current_user, project_id, payload.user_id)
    return {"message": "Member added"}


@router.delete("/{project_id}/members/{user_id}", response_model=MessageResponse)
async def remove_member(
    project_id: uuid.UUID,
    user_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    project_service = ProjectService(session)
    await project_service.remove_member(current_user, project_id, user_id)
    return {"message": "Member removed"}


@router.delete("/{project_id}", response_model=MessageResponse)
async def delete_project(
    project_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Delete a project. Its tasks are kept."""
    project_service = ProjectService(session)
    await project_service.delete(current_user, project_id)
    return {"message": "Project deleted"}
