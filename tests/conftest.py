"""Pytest configuration and fixtures."""
import os
import uuid
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool
from fastapi.testclient import TestClient

TEST_DB_PATH = Path("test_app.db")
if TEST_DB_PATH.exists():
    TEST_DB_PATH.unlink()

TEST_DATABASE_URL = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)
os.environ.setdefault("EVENT_SWEEP_AUTOSTART", "false")
os.environ.setdefault("LOG_FORMAT", "text")

from app.main import app  # noqa: E402
from app.database import Base, get_db  # noqa: E402
from app.core.security import UserRole  # noqa: E402
from app.models.project import Project  # noqa: E402
from app.models.user import User  # noqa: E402
from app.services.auth_service import AuthService  # noqa: E402
from app.services.event_processor import event_processor  # noqa: E402
from app.services.event_service import admin_notifier, event_recorder  # noqa: E402
from app.utils.security import create_access_token  # noqa: E402


# Create test engine. Each session gets its own connection so background
# recorder tasks never share one with the test.
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=NullPool,
)

TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@pytest_asyncio.fixture(scope="function")
async def db_session(monkeypatch):
    """Create a test database session with the event pipeline pointed at it."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    monkeypatch.setattr(event_recorder, "session_factory", TestSessionLocal)
    monkeypatch.setattr(admin_notifier, "session_factory", TestSessionLocal)
    monkeypatch.setattr(event_processor, "session_factory", TestSessionLocal)

    async with TestSessionLocal() as session:
        yield session

    await event_recorder.drain()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(scope="function")
def client(db_session: AsyncSession):
    """Create a test client overriding database dependency."""

    async def override_get_db():
        async with TestSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


async def _make_user(db: AsyncSession, username: str, role: UserRole = UserRole.USER) -> User:
    user = User(
        id=uuid.uuid4(),
        name=username.capitalize(),
        username=username,
        email=f"{username}@example.com",
        password_hash=AuthService.hash_password("testpassword"),
        role=role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession):
    """Regular user owning the test project."""
    return await _make_user(db_session, "alice")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession):
    """Second regular user, used as assignee or intruder."""
    return await _make_user(db_session, "bob")


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession):
    """Admin receiving the system event fan-out."""
    return await _make_user(db_session, "root", role=UserRole.ADMIN)


@pytest_asyncio.fixture
async def test_project(db_session: AsyncSession, test_user: User):
    project = Project(name="Website", description="Relaunch", created_by_id=test_user.id)
    db_session.add(project)
    await db_session.commit()
    await db_session.refresh(project)
    return project


def _headers_for(user: User) -> dict:
    token = create_access_token({"sub": str(user.id), "email": user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(client, test_user):
    """Get authentication headers."""
    return _headers_for(test_user)


@pytest.fixture
def other_headers(client, other_user):
    return _headers_for(other_user)


@pytest.fixture
def admin_headers(client, admin_user):
    return _headers_for(admin_user)


@pytest.fixture
def session_factory():
    """Session factory bound to the test database."""
    return TestSessionLocal


@pytest.fixture
def fetch_rows():
    """Read rows through a fresh session, so results never come from a stale identity map."""

    async def _fetch(model, **filters):
        async with TestSessionLocal() as db:
            query = select(model)
            for field, value in filters.items():
                query = query.where(getattr(model, field) == value)
            result = await db.execute(query.order_by(model.id))
            return list(result.scalars().all())

    return _fetch


@pytest.fixture
def make_user(db_session):
    async def _make(username: str, role: UserRole = UserRole.USER) -> User:
        return await _make_user(db_session, username, role)

    return _make
