"""
Authentication API routes.
"""
from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from tasktrail.database import get_session
from tasktrail.services.auth_service import AuthService
from tasktrail.schemas.auth import LoginRequest, TokenResponse
from tasktrail.schemas.user import UserResponse
from tasktrail.api.deps import get_current_user
from tasktrail.models.user import User

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    session: AsyncSession = Depends(get_session)
):
    """Login with an email address and get an access token."""
    auth_service = AuthService(session)
    return await auth_service.login(request.email)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get the logged-in user."""
    return current_user
