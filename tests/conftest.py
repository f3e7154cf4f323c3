"""Shared test fixtures."""

from __future__ import annotations

import os
import time
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from dataclasses import dataclass
from unittest.mock import AsyncMock, MagicMock

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

# Tests run against an in-memory SQLite database without Redis
TEST_JWT_SECRET = "loomero-test-secret-with-at-least-32-characters"
os.environ["LOOMERO_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOOMERO_JWT_SECRET"] = TEST_JWT_SECRET
os.environ["LOOMERO_SEED_DEFAULT_BADGES"] = "false"

from loomero.config import get_settings  # noqa: E402

get_settings.cache_clear()

from loomero.database import close_db, get_engine, init_db  # noqa: E402
from loomero.db.base import Base  # noqa: E402
from loomero.db.models import Profile, utcnow  # noqa: E402
from loomero.email.service import reset_email_service  # noqa: E402
from loomero.main import create_app  # noqa: E402
from loomero.redis_client import close_redis  # noqa: E402


def make_token(
    user_id: uuid.UUID,
    email: str,
    full_name: str | None = None,
    expires_in: int = 3600,
    audience: str = "authenticated",
    secret: str = TEST_JWT_SECRET,
) -> str:
    """Mint a token shaped like the ones the identity provider issues."""
    now = int(time.time())
    payload = {
        "sub": str(user_id),
        "email": email,
        "aud": audience,
        "iat": now,
        "exp": now + expires_in,
        "user_metadata": {"full_name": full_name, "avatar_url": None, "provider_id": f"google-{user_id.hex[:8]}"},
    }
    return jwt.encode(payload, secret, algorithm="HS256")


@dataclass
class Actor:
    """A signed-in identity, with or without a profile."""

    id: uuid.UUID
    email: str
    full_name: str | None
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP test client backed by a fresh schema."""
    app = create_app()
    settings = get_settings()
    await close_redis()
    await init_db(settings.database_url)
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await close_db()
    reset_email_service()


@pytest_asyncio.fixture
async def db_session(client: AsyncClient) -> AsyncGenerator[AsyncSession, None]:
    """Get a direct database session for test assertions."""
    async with AsyncSession(get_engine(), expire_on_commit=False) as session:
        yield session


@pytest.fixture
def identity() -> Callable[..., Actor]:
    """Build a signed-in identity that has not been onboarded yet."""

    def _build(email: str | None = None, full_name: str | None = None) -> Actor:
        user_id = uuid.uuid4()
        email = email or f"user-{user_id.hex[:8]}@loomero.dev"
        return Actor(id=user_id, email=email, full_name=full_name, token=make_token(user_id, email, full_name))

    return _build


@pytest_asyncio.fixture
async def make_user(
    client: AsyncClient, identity: Callable[..., Actor]
) -> Callable[..., Awaitable[Actor]]:
    """Factory for onboarded users: writes a profile and returns a signed-in actor."""

    async def _create(role: str = "intern", email: str | None = None, full_name: str | None = None) -> Actor:
        actor = identity(email=email, full_name=full_name if full_name is not None else f"Test {role.title()}")
        async with AsyncSession(get_engine()) as session:
            now = utcnow()
            session.add(Profile(
                id=actor.id,
                email=actor.email,
                full_name=actor.full_name,
                role=role,
                created_at=now,
                updated_at=now,
            ))
            await session.commit()
        return actor

    return _create


@pytest_asyncio.fixture
async def admin(make_user: Callable[..., Awaitable[Actor]]) -> Actor:
    return await make_user("admin", email="admin@loomero.dev", full_name="Ada Admin")


@pytest_asyncio.fixture
async def mentor(make_user: Callable[..., Awaitable[Actor]]) -> Actor:
    return await make_user("mentor", email="mentor@loomero.dev", full_name="Max Mentor")


@pytest_asyncio.fixture
async def intern(make_user: Callable[..., Awaitable[Actor]]) -> Actor:
    return await make_user("intern", email="intern@loomero.dev", full_name="Ivy Intern")


@pytest.fixture
def mock_email_service(monkeypatch):
    """Mock the email service to prevent actual email sending."""
    mock_service = MagicMock()
    mock_service.is_configured = True
    mock_service.send_template = AsyncMock(return_value=True)
    mock_service.send_email = AsyncMock(return_value=True)

    monkeypatch.setattr("loomero.email.service.get_email_service", lambda *a, **kw: mock_service)
    monkeypatch.setattr("loomero.functions.router.get_email_service", lambda *a, **kw: mock_service)
    return mock_service


@pytest_asyncio.fixture
async def project_with_milestones(
    client: AsyncClient, admin: Actor
) -> dict:
    """A project with two milestones, created through the API."""
    response = await client.post("/api/v1/projects", headers=admin.headers, json={
        "title": "Python API Platform",
        "description": "Build the internship tracker backend",
        "duration_weeks": 8,
    })
    project = response.json()
    milestones = []
    for title in ("Design schema", "Ship endpoints"):
        response = await client.post(
            f"/api/v1/projects/{project['id']}/milestones",
            headers=admin.headers,
            json={"title": title},
        )
        milestones.append(response.json())
    return {"project": project, "milestones": milestones}
