"""
Clinic Tracker Backend — Test Configuration (conftest.py)
==========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh SQLite database file (aiosqlite) with all
       tables created from Base.metadata. The app's get_db_session
       dependency is overridden to use it, and outbound mail is replaced
       by an AsyncMock so nothing leaves the process.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── db_engine:        async engine on a temp SQLite file, tables created
    ├── session_factory:  async_sessionmaker bound to db_engine
    ├── mail_sender:      fake MailSender installed on auth_service
    ├── test_client:      HTTPX AsyncClient wired to the app and the temp DB
    ├── user / other_user: persisted accounts
    ├── patient:          persisted EMR row with a complete lab panel
    └── mock_db_session:  AsyncMock session for pure service tests
"""

import os
from datetime import date
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["REQUIRE_EXISTING_USER"] = "true"
os.environ["STEATOSIS_FORMULA"] = "fli_ast"
os.environ["INCLUDE_FIBROSIS_SCORE"] = "true"
# The app-wide limiter must not trip during the API tests; it is tested
# on its own app in test_health_and_middleware.py
os.environ["AUTH_RATE_LIMIT_REQUESTS"] = "10000"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from clinic_api.database import Base, get_db_session
from clinic_api.main import app
from clinic_api.models import EmrRecord, User
from clinic_api.services.auth_service import auth_service
from clinic_api.services.mail_service import MailSender
from clinic_api.services.user_service import hash_password

TEST_PASSWORD = "s3cret-pass"

# Labs chosen so every index is computable
PATIENT_LABS = {
    "birth_date": date(1970, 1, 1),
    "gender": "female",
    "ast": 40.0,
    "alt": 25.0,
    "ggt": 50.0,
    "albumin": 4.0,
    "weight": 78.0,
    "waist_circumference": 100.0,
    "bmi": 30.0,
    "glucose": 110.0,
    "hba1c": 5.6,
    "triglyceride": 150.0,
    "plt": 200,
}


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """A fresh SQLite database per test, schema created from the models."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'clinic_test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    """
    Session factory for seeding and for asserting on stored rows.

    Usage:
        async with session_factory() as session:
            session.add(row)
            await session.commit()
    """
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    What:    An AsyncMock that simulates AsyncSession behavior.
    Why:     Pure service logic (ownership checks) should not need a database.
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Outbound mail
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mail_sender(monkeypatch):
    """
    Replaces the outbound mail sender with a mock.

    Usage:
        mail_sender.send.assert_awaited_once()
        mail_sender.send.side_effect = MailDeliveryError()
    """
    sender = MagicMock(spec=MailSender)
    sender.send = AsyncMock(return_value=None)
    sender.is_configured.return_value = True
    monkeypatch.setattr(auth_service, "sender", sender)
    return sender


# ══════════════════════════════════════════════════════════════════════════
# API client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory, mail_sender) -> AsyncGenerator[AsyncClient, None]:
    """
    Provides an async HTTP test client for endpoint testing.

    Requests run against the per-test database with the same
    commit-on-success / rollback-on-error contract as production.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ══════════════════════════════════════════════════════════════════════════
# Seed data
# ══════════════════════════════════════════════════════════════════════════

async def _add(session_factory, row):
    async with session_factory() as session:
        session.add(row)
        await session.commit()
        return row


@pytest_asyncio.fixture
async def user(session_factory) -> User:
    return await _add(
        session_factory,
        User(
            username="alice",
            email="alice@example.com",
            password_hash=hash_password(TEST_PASSWORD),
            patient_id="P-1001",
        ),
    )


@pytest_asyncio.fixture
async def other_user(session_factory) -> User:
    return await _add(
        session_factory,
        User(
            username="bob",
            email="bob@example.com",
            password_hash=hash_password(TEST_PASSWORD),
        ),
    )


@pytest_asyncio.fixture
async def patient(session_factory) -> EmrRecord:
    return await _add(
        session_factory,
        EmrRecord(
            patient_name="Alice Kim",
            patient_id="P-1001",
            email="alice@example.com",
            **PATIENT_LABS,
        ),
    )
