import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import uuid
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Dict

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from classpoints.auth.security import create_access_token
from classpoints.core.records import ProfileRecord
from classpoints.db.session import Base, get_db
from classpoints.main import app
from classpoints.store.record_store import RecordStore


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def make_headers(subject: str, role: str) -> Dict[str, str]:
    token = create_access_token(subject={"sub": subject, "role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """One in-memory SQLite database per test, shared by every connection through StaticPool."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for a test and override the FastAPI dependency."""
    async_session = async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.pop(get_db, None)


@pytest.fixture()
def store(db_session: AsyncSession) -> RecordStore:
    return RecordStore(db_session)


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
async def active_teacher(store: RecordStore) -> ProfileRecord:
    profile = await store.create_profile(
        uuid.uuid4(),
        username="ms_lee",
        full_name="Lee Wen",
        expire_at=datetime.now(timezone.utc) + timedelta(days=30),
    )
    await store.commit()
    return profile


@pytest.fixture()
def teacher_headers(active_teacher: ProfileRecord) -> Dict[str, str]:
    return make_headers(str(active_teacher.id), "teacher")


@pytest.fixture()
def admin_headers() -> Dict[str, str]:
    return make_headers("admin", "admin")


@pytest.fixture()
def headers_for():
    """Build bearer headers for an arbitrary subject/role, e.g. a second teacher."""
    return make_headers
