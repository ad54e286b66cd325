import os
from collections.abc import AsyncGenerator

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET_KEY", "test-refresh-secret")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DIGEST_ENABLED"] = "false"
os.environ["NOTIFICATION_BACKEND"] = "console"
os.environ.setdefault("LOG_FORMAT", "console")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tests.helpers import CapturingSender, bearer, register
from welltrack.core.rate_limit import limiter
from welltrack.database import enable_sqlite_foreign_keys, get_db
from welltrack.main import app
from welltrack.models import metadata
from welltrack.models.trackables import habits, symptoms
from welltrack.services.notification_service import get_notification_sender


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def sender() -> CapturingSender:
    return CapturingSender()


@pytest_asyncio.fixture
async def client(session_factory, sender) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_sender] = lambda: sender

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def rate_limited():
    """Enable the limiter for one test with empty counters."""
    limiter.reset()
    limiter.enabled = True
    yield limiter
    limiter.enabled = False
    limiter.reset()


@pytest_asyncio.fixture
async def auth(client) -> dict:
    """Registered user: the full register response."""
    return await register(client, displayName="Alex")


@pytest.fixture
def auth_headers(auth) -> dict:
    return bearer(auth)


@pytest_asyncio.fixture
async def other_headers(client) -> dict:
    """Headers of a second, unrelated user."""
    return bearer(await register(client, "sam@example.com"))


@pytest_asyncio.fixture
async def system_symptom(db_session) -> dict:
    row = {"name": "Headache", "category": "Pain", "user_id": None}
    result = await db_session.execute(insert(symptoms).values(**row).returning(symptoms.c.id))
    await db_session.commit()
    return {"id": str(result.scalar_one()), **row}


@pytest_asyncio.fixture
async def system_habits(db_session) -> dict[str, dict]:
    """One system habit per tracking type, keyed by type."""
    created = {}
    for name, tracking_type, unit in (
        ("Exercise", "boolean", None),
        ("Water Intake", "numeric", "glasses"),
        ("Sleep Duration", "duration", "hours"),
    ):
        row = {"name": name, "tracking_type": tracking_type, "unit": unit, "user_id": None}
        result = await db_session.execute(insert(habits).values(**row).returning(habits.c.id))
        created[tracking_type] = {"id": str(result.scalar_one()), **row}
    await db_session.commit()
    return created
