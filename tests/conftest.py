"""
Pytest fixtures for content operations tests.

All tests share one temp-file SQLite database (in-memory SQLite is
per-connection, and the dashboards open several connections at once).
The environment is set before any contentops import so the engine in
contentops.database points at it.
"""

import os
import tempfile
from typing import AsyncGenerator

_tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
_tmp.close()
TEST_DB_PATH = _tmp.name
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "test"
os.environ["SMTP_USER"] = ""

from contentops.config import get_settings  # noqa: E402

get_settings.cache_clear()

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from contentops.api.deps import get_notifier  # noqa: E402
from contentops.database import async_session_maker, engine  # noqa: E402
from contentops.kernel.identity.jwt import JWTManager  # noqa: E402
from contentops.kernel.models import Base, User, UserRole  # noqa: E402
from contentops.main import app  # noqa: E402

from factories import make_user  # noqa: E402


def pytest_sessionfinish(session, exitstatus):
    """Clean up temp DB file after test run."""
    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(TEST_DB_PATH + suffix):
            os.unlink(TEST_DB_PATH + suffix)


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Fresh schema per test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def session_factory(db_engine):
    return async_session_maker


@pytest_asyncio.fixture
async def super_admin(db_session: AsyncSession) -> User:
    return await make_user(db_session, UserRole.SUPER_ADMIN, "Root User")


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession) -> User:
    return await make_user(db_session, UserRole.ADMIN, "Alice Admin")


@pytest_asyncio.fixture
async def other_admin(db_session: AsyncSession) -> User:
    return await make_user(db_session, UserRole.ADMIN, "Bob Admin")


@pytest_asyncio.fixture
async def founder(db_session: AsyncSession) -> User:
    return await make_user(db_session, UserRole.FOUNDER, "Fay Founder", "Acme", "SaaS")


@pytest_asyncio.fixture
async def other_founder(db_session: AsyncSession) -> User:
    return await make_user(db_session, UserRole.FOUNDER, "Gus Founder", "Globex", "Fintech")


@pytest.fixture
def jwt_manager() -> JWTManager:
    return JWTManager(
        secret_key="test-secret-key-for-testing-only",
        algorithm="HS256",
        access_token_expire_minutes=30,
    )


class RecordingSender:
    """Notification sender that keeps what it was asked to send."""

    def __init__(self):
        self.sent = []

    async def send(self, template_kind, recipient, payload):
        self.sent.append((template_kind, recipient, payload))


@pytest.fixture
def notifier() -> RecordingSender:
    return RecordingSender()


@pytest_asyncio.fixture
async def client(db_engine, notifier) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app, with outbound email captured."""
    app.dependency_overrides[get_notifier] = lambda: notifier
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
