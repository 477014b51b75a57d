"""Pytest configuration for TaskTrail tests."""

import os
import sys
from pathlib import Path

# Ensure project root is on PYTHONPATH
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# Settings are read at import time, so these must be set before tasktrail is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import tasktrail.models  # noqa: F401
from tasktrail.core.security import create_access_token
from tasktrail.models.user import User, Roles


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
def make_user(session):
    """Factory for persisted users."""
    async def _make(name: str, role: str = Roles.MEMBER, email: str = None) -> User:
        user = User(
            email=email or f"{name.lower()}@example.com",
            name=name,
            role=role,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user
    return _make


@pytest.fixture
async def manager(make_user):
    return await make_user("Maha", Roles.MANAGER)


@pytest.fixture
async def member(make_user):
    return await make_user("Faris")


@pytest.fixture
async def other_member(make_user):
    return await make_user("Sara")


@pytest.fixture
async def client(session):
    """HTTP client against the app, sharing the test session."""
    from tasktrail.database import get_session
    from tasktrail.main import app

    async def override_get_session():
        yield session

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Bearer headers for a user."""
    def _headers(user: User) -> dict:
        token = create_access_token(user.id, user.role)
        return {"Authorization": f"Bearer {token}"}
    return _headers
