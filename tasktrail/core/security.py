"""
Session tokens for the TaskTrail API.

Login is by email only, so the JWT is the whole session: it names the user and
their role at the time of login. The role claim is informational; every request
reloads the user and checks the current role.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
import uuid

import jwt

from tasktrail.config import settings

ACCESS_TOKEN_TYPE = "access"


def create_access_token(
    user_id: uuid.UUID,
    role: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Issue a signed access token for a user."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    claims = {
        "sub": str(user_id),
        "role": role,
        "type": ACCESS_TOKEN_TYPE,
        "iat": now,
        "exp": expire,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def read_access_token(token: str) -> Optional[uuid.UUID]:
    """
    Return the user id carried by a valid access token.

    Returns None for an expired, tampered or malformed token, or one whose
    subject is not a UUID.
    """
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.InvalidTokenError:
        return None

    if claims.get("type") != ACCESS_TOKEN_TYPE:
        return None
    try:
        return uuid.UUID(claims.get("sub", ""))
    except ValueError:
        return None
