"""
Test configuration and shared fixtures.
Every test gets a fresh in-memory SQLite database; each request runs in its
own session like it does in production. The mailer, the model provider and
avatar storage are replaced with in-process fakes.
"""
from __future__ import annotations

import os

os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from collections.abc import AsyncGenerator, Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.security import create_access_token, hash_password
from app.crud.user import crud_user
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models.user import User
from app.services.email_service import TeamInvitationEmail, get_mailer
from app.services.llm_provider import LLMProvider, LLMProviderError, get_llm_provider
from app.services.storage_service import AvatarStorage, get_avatar_storage

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
DEFAULT_PASSWORD = "TestPass1"


# ── Fakes ─────────────────────────────────────────────────────────────────────

class FakeMailer:
    """Collects invitations instead of talking to an SMTP server."""

    def __init__(self, fail: bool = False) -> None:
        self.configured = True
        self.fail = fail
        self.sent: list[TeamInvitationEmail] = []

    def send_team_invitation(self, invitation: TeamInvitationEmail) -> None:
        if self.fail:
            raise ConnectionRefusedError("SMTP server unavailable")
        self.sent.append(invitation)


class FakeLLMProvider(LLMProvider):
    """Returns queued replies and records every prompt it receives."""

    def __init__(self) -> None:
        self.replies: list[str | Exception] = []
        self.calls: list[dict[str, Any]] = []

    def queue(self, reply: str | Exception) -> None:
        self.replies.append(reply)

    async def generate(self, prompt: str, *, temperature: float = 0.3, max_tokens: int = 2000) -> str:
        self.calls.append({"prompt": prompt, "temperature": temperature})
        if not self.replies:
            raise LLMProviderError("no reply queued")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def get_provider_name(self) -> str:
        return "fake-llm"


class RecordingAvatarStorage(AvatarStorage):
    """Local storage that also logs deletions in order."""

    def __init__(self, root_dir: str, public_base_url: str) -> None:
        super().__init__(root_dir, public_base_url)
        self.deleted: list[str] = []

    def delete(self, path: str) -> bool:
        self.deleted.append(path)
        return super().delete(path)


@dataclass
class UserHandle:
    user: User
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return str(self.user.id)


# ── Database ──────────────────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    await engine.dispose()


@pytest_asyncio.fixture
async def db(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Session for seeding and inspecting data outside of requests."""
    async with session_factory() as session:
        yield session


# ── Fakes as fixtures ─────────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def mailer() -> FakeMailer:
    return FakeMailer()


@pytest_asyncio.fixture
async def llm() -> FakeLLMProvider:
    return FakeLLMProvider()


@pytest_asyncio.fixture
async def storage(tmp_path: Any) -> RecordingAvatarStorage:
    return RecordingAvatarStorage(str(tmp_path / "avatars"), "http://test/avatars")


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    mailer: FakeMailer,
    llm: FakeLLMProvider,
    storage: RecordingAvatarStorage,
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client with the test database and fakes injected."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_llm_provider] = lambda: llm
    app.dependency_overrides[get_avatar_storage] = lambda: storage

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# ── Users ─────────────────────────────────────────────────────────────────────

UserFactory = Callable[..., Awaitable[UserHandle]]


@pytest_asyncio.fixture
async def make_user(db: AsyncSession) -> UserFactory:
    """Create a user with a profile directly in the database and mint a token."""

    async def _make(email: str, full_name: str | None = None) -> UserHandle:
        user = await crud_user.create_with_profile(
            db,
            email=email,
            hashed_password=hash_password(DEFAULT_PASSWORD),
            full_name=full_name,
        )
        await db.commit()
        token = create_access_token(str(user.id), user.email)
        return UserHandle(user=user, headers={"Authorization": f"Bearer {token}"})

    return _make


@pytest_asyncio.fixture
async def alice(make_user: UserFactory) -> UserHandle:
    return await make_user("alice@example.com", "Alice Leader")


@pytest_asyncio.fixture
async def bob(make_user: UserFactory) -> UserHandle:
    return await make_user("bob@example.com", "Bob Member")


@pytest_asyncio.fixture
async def carol(make_user: UserFactory) -> UserHandle:
    return await make_user("carol@example.com", "Carol Outsider")


# ── Teams ─────────────────────────────────────────────────────────────────────

async def create_team(client: AsyncClient, leader: UserHandle, name: str = "Core Team") -> dict:
    response = await client.post("/api/teams", json={"name": name}, headers=leader.headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def add_member(
    client: AsyncClient, team_id: str, leader: UserHandle, member: UserHandle, role: str = "member"
) -> dict:
    response = await client.post(
        f"/api/teams/{team_id}/members",
        json={"user_id": member.id, "role": role},
        headers=leader.headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def create_task(client: AsyncClient, owner: UserHandle, **fields: Any) -> dict:
    payload = {"title": "Test Task", **fields}
    response = await client.post("/api/tasks", json=payload, headers=owner.headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest_asyncio.fixture
async def team(client: AsyncClient, alice: UserHandle, bob: UserHandle) -> dict:
    """A team led by alice with bob as a plain member."""
    created = await create_team(client, alice)
    await add_member(client, created["id"], alice, bob)
    return created
