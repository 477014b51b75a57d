"""
Authentication schemas.
"""
from pydantic import BaseModel, EmailStr

from tasktrail.schemas.user import UserResponse


class LoginRequest(BaseModel):
    """Email login request. Accounts are created by a manager; there is no password."""
    email: EmailStr

    class Config:
        json_schema_extra = {
            "example": {
                "email": "maha@company.com"
            }
        }


class TokenResponse(BaseModel):
    """Token response after login."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    user: UserResponse
