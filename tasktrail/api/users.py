"""
User API routes.
"""
import uuid
from typing import List
from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from tasktrail.database import get_session
from tasktrail.services.user_service import UserService
from tasktrail.services.history_service import HistoryService
from tasktrail.schemas.user import UserCreate, UserUpdate, UserResponse, UserHistoryProfile
from tasktrail.api.deps import get_current_user, get_current_manager
from tasktrail.models.user import User

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/", response_model=List[UserResponse])
async def list_users(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """List active team members."""
    user_service = UserService(session)
    return await user_service.list()


@router.post("/", response_model=UserResponse, status_code=201)
async def create_user(
    user_data: UserCreate,
    current_user: User = Depends(get_current_manager),
    session: AsyncSession = Depends(get_session)
):
    """Add a team member."""
    user_service = UserService(session)
    return await user_service.create(current_user, user_data)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Get a user profile."""
    user_service = UserService(session)
    return await user_service.get_profile(user_id)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: uuid.UUID,
    user_data: UserUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Update a user profile."""
    user_service = UserService(session)
    return await user_service.update(current_user, user_id, user_data)


@router.get("/{user_id}/history", response_model=UserHistoryProfile)
async def get_user_history(
    user_id: uuid.UUID,
    current_user: User = Depends(get_current_manager),
    session: AsyncSession = Depends(get_session)
):
    """Tasks, projects, activity and delivery metrics of one team member."""
    history_service = HistoryService(session)
    return await history_service.get_user_profile(user_id)
