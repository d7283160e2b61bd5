"""Shared fixtures.

Settings are read at import time, so the environment is prepared before any
``app`` module is imported.
"""

import os

os.environ["POSTGRES_DSN"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENV"] = "test"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["SUPERADMIN_ENABLED"] = "false"
os.environ["EVENT_BUS_PROVIDER"] = "noop"
os.environ["WEBHOOK_DELIVERY_MODE"] = "settle"

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from app.core.base import Base
from app.core.security import create_access_token
import app.modules.users.models  # noqa: F401
import app.modules.projects.models  # noqa: F401
import app.modules.categories.models  # noqa: F401
import app.modules.templates.models  # noqa: F401
import app.modules.webhooks.models  # noqa: F401
from app.modules.users.models import User, Role
from app.modules.webhooks.registry import WebhookRegistry
from app.modules.webhooks.streams import StreamManager


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    await engine.dispose()


@pytest_asyncio.fixture
async def owner(session_factory) -> User:
    async with session_factory() as s:
        user = User(email="owner@example.com", password="x", role=Role.USER)
        s.add(user)
        await s.commit()
    return user


@pytest.fixture
def registry(session_factory) -> WebhookRegistry:
    return WebhookRegistry(session_factory)


@pytest.fixture
def streams() -> StreamManager:
    return StreamManager(max_pending=10)


class RecordingTransport:
    """httpx handler that records every request and answers per-URL."""

    def __init__(self, statuses: dict[str, int] | None = None, errors: dict[str, Exception] | None = None):
        self.statuses = statuses or {}
        self.errors = errors or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        if url in self.errors:
            raise self.errors[url]
        return httpx.Response(self.statuses.get(url, 200))

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))

    def to(self, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if str(r.url) == url]


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def bearer():
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.email, user.role)}"}
    return _headers
