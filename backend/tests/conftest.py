from __future__ import annotations

import os
import uuid

# Settings() is built at import time; give it something to parse before any
# salesup module is imported. A real TEST_DATABASE_URL_ASYNC wins below.
os.environ.setdefault("DATABASE_URL_ASYNC", "sqlite+aiosqlite:///./salesup-test.db")
os.environ.setdefault("DATABASE_URL_SYNC", "sqlite:///./salesup-test.db")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import delete, text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from salesup.db.session import get_db
from salesup.services.email import get_email_service

# Ensure Base + models are registered before create_all
from salesup.db.base import Base
import salesup.models  # noqa: F401


# ---------------------------------------------------------
# Database config
# ---------------------------------------------------------
@pytest.fixture(scope="session")
def database_url_async(tmp_path_factory) -> str:
    """
    Postgres when TEST_DATABASE_URL_ASYNC is set (isolated schema),
    otherwise a throwaway SQLite file.
    """
    url = os.getenv("TEST_DATABASE_URL_ASYNC")
    if url:
        return url
    path = tmp_path_factory.mktemp("db") / "salesup.db"
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture(scope="session")
def is_postgres(database_url_async: str) -> bool:
    return database_url_async.startswith("postgresql")


@pytest.fixture(scope="session")
def test_schema_name() -> str:
    return f"test_{uuid.uuid4().hex}"


# ---------------------------------------------------------
# Engine + schema lifecycle
# ---------------------------------------------------------
@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def engine(database_url_async: str, is_postgres: bool, test_schema_name: str):
    connect_args = {"server_settings": {"search_path": test_schema_name}} if is_postgres else {}
    engine = create_async_engine(database_url_async, poolclass=NullPool, connect_args=connect_args)

    async with engine.begin() as conn:
        if is_postgres:
            await conn.execute(text(f'CREATE SCHEMA IF NOT EXISTS "{test_schema_name}"'))
            await conn.execute(text(f'SET search_path TO "{test_schema_name}"'))
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    if is_postgres:
        async with engine.begin() as conn:
            await conn.execute(text(f'DROP SCHEMA IF EXISTS "{test_schema_name}" CASCADE'))

    await engine.dispose()


@pytest.fixture(scope="session")
def sessionmaker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def _clean_tables(engine):
    """
    Every DB-backed test starts from empty tables. Pure unit tests never
    request this, so they run without a database.
    """
    async with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            await conn.execute(delete(table))
    yield


# ---------------------------------------------------------
# DB session for assertions / setup
# ---------------------------------------------------------
@pytest_asyncio.fixture()
async def db(sessionmaker, _clean_tables):
    """
    Session for test setup & assertions ONLY.
    """
    async with sessionmaker() as session:
        yield session
        await session.rollback()


# ---------------------------------------------------------
# Email: record instead of sending
# ---------------------------------------------------------
class RecordingMailer:
    base_url = "http://frontend.test"
    is_configured = True

    def __init__(self):
        self.sent: list[tuple[str, str]] = []

    def invite_url(self, token: str) -> str:
        return f"{self.base_url}/invite/{token}"

    def send_invitation_email(self, *, email: str, first_name: str, invited_by_name: str, token: str) -> bool:
        self.sent.append(("invitation", email))
        return True

    def send_welcome_email(self, *, email: str, first_name: str) -> bool:
        self.sent.append(("welcome", email))
        return True


@pytest.fixture()
def mailer() -> RecordingMailer:
    return RecordingMailer()


# ---------------------------------------------------------
# FastAPI app + dependency override
# ---------------------------------------------------------
@pytest.fixture()
def app(sessionmaker, mailer):
    from salesup.main import app as fastapi_app

    async def _override_get_db():
        async with sessionmaker() as session:
            yield session

    fastapi_app.dependency_overrides[get_db] = _override_get_db
    fastapi_app.dependency_overrides[get_email_service] = lambda: mailer
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


# ---------------------------------------------------------
# HTTP client
# ---------------------------------------------------------
@pytest_asyncio.fixture()
async def client(app, _clean_tables):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

