"""
Authentication service - email login issuing JWT access tokens.
"""
import logging

from sqlmodel.ext.asyncio.session import AsyncSession

from tasktrail.config import settings
from tasktrail.core.security import create_access_token
from tasktrail.core.exceptions import raise_unauthorized
from tasktrail.repositories.user_repo import UserRepository
from tasktrail.schemas.user import UserResponse

logger = logging.getLogger(__name__)


class AuthService:
    """Service for authentication operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)

    async def login(self, email: str) -> dict:
        """
        Log in by email.
        Accounts are created by managers, so an unknown address is rejected
        rather than registered.
        """
        user = await self.user_repo.get_by_email(email)
        if not user:
            logger.info(f"Login rejected for unknown email {email}")
            raise_unauthorized("User not found. Please ask a manager to add you.")
        if not user.is_active:
            raise_unauthorized("User account is deactivated")

        access_token = create_access_token(user.id, user.role)
        logger.info(f"User {user.id} logged in")

        return {
            "access_token": access_token,
            "token_type": "bearer",
            "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            "user": UserResponse.model_validate(user),
        }
