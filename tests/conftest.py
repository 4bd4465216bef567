"""
Test configuration and fixtures for the Caravan API.

Every test gets a fresh database built from the models, so services and
routes run against real SQL (unique indexes, RETURNING, ON CONFLICT) instead
of mocks.
"""

import os
import tempfile

from dotenv import load_dotenv

load_dotenv()

test_db_url = os.getenv("TEST_DATABASE_URL")
if test_db_url:
    if "postgresql://" in test_db_url and "asyncpg" not in test_db_url:
        test_db_url = test_db_url.replace("postgresql://", "postgresql+asyncpg://")
    os.environ["DATABASE_URL"] = test_db_url
else:
    test_db_path = os.path.join(tempfile.mkdtemp(), "caravan_test.db")
    os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{test_db_path}"

os.environ["REVENUECAT_WEBHOOK_AUTH"] = ""
os.environ["REVENUECAT_API_KEY"] = "test-revenuecat-key"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.features.auth.models.user import User
from app.features.auth.utils.security import create_access_token
from app.platform.db.models import Base
from app.platform.db.session import get_db


def _serialize_sqlite_writers(engine):
    """
    Take the write lock when a transaction starts. With SQLite's default
    deferred BEGIN, racing writers fail with "database is locked" instead of
    reaching the constraint the race is about.
    """
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


@pytest_asyncio.fixture
async def engine(tmp_path):
    url = test_db_url or f"sqlite+aiosqlite:///{tmp_path / 'caravan.db'}"
    engine = create_async_engine(url)
    if engine.dialect.name == "sqlite":
        _serialize_sqlite_writers(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def make_user(session_factory):
    """
    Factory for active users. Each user is written in its own session so no
    test session is left holding a transaction.
    """
    async def _make_user(email: str, name: str | None = None, **fields) -> User:
        fields.setdefault("is_active", True)
        async with session_factory() as session:
            user = User(email=email, name=name or email.split("@")[0], **fields)
            session.add(user)
            await session.commit()
            await session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def test_app():
    from app.main import app

    return app


@pytest_asyncio.fixture
async def client(test_app, session_factory):
    """
    HTTP client bound to the app, with get_db pointed at the per-test database.
    """
    async def override_get_db():
        async with session_factory() as session:
            yield session

    test_app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as ac:
        yield ac
    test_app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def auth_headers():
    """Bearer headers for a user, as issued after a successful login."""
    def _auth_headers(user: User) -> dict:
        token = create_access_token(data={"sub": str(user.id), "email": user.email})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
