"""
API dependencies - shared across all routes.
"""

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlmodel.ext.asyncio.session import AsyncSession

from tasktrail.database import get_session
from tasktrail.config import settings
from tasktrail.core.security import read_access_token
from tasktrail.core.exceptions import raise_unauthorized
from tasktrail.core.permissions import require_manager
from tasktrail.models.user import User
from tasktrail.repositories.user_repo import UserRepository


oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    session: AsyncSession = Depends(get_session)
) -> User:
    """Get current authenticated user from JWT token."""
    user_id = read_access_token(token)
    if user_id is None:
        raise_unauthorized("Could not validate credentials")

    user_repo = UserRepository(session)
    user = await user_repo.get(user_id)

    if not user:
        raise_unauthorized("User not found")

    if not user.is_active:
        raise_unauthorized("User account is deactivated")

    return user


async def get_current_manager(
    current_user: User = Depends(get_current_user)
) -> User:
    """Get current user, must be a manager."""
    require_manager(current_user)
    return current_user
