"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Minimal environment for Settings() at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from referral_core.models import Base, User


class RecordingAuditSink:
    """Audit sink that keeps events in memory."""

    def __init__(self):
        self.events = []

    async def emit(self, event):
        self.events.append(event)

    def actions(self):
        return [event.action for event in self.events]


@pytest.fixture
def mock_session():
    """Mock AsyncSession for tests without a database."""
    session = AsyncMock()
    session.info = {}
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    session.refresh = AsyncMock()
    return session


@pytest.fixture
def audit_sink():
    """In-memory audit sink."""
    return RecordingAuditSink()


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine with all tables."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Database session; services commit their own units of work."""
    session_maker = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_maker() as session:
        yield session


@pytest.fixture
def make_user(db_session):
    """Factory creating committed users."""
    counter = {"n": 0}

    async def _make_user(
        username: str | None = None,
        referral_code: str | None = None,
        commission_balance: Decimal = Decimal("0"),
        total_commission_earned: Decimal | None = None,
        is_active: bool = True,
        is_banned: bool = False,
    ) -> User:
        counter["n"] += 1
        user = User(
            username=username or f"user{counter['n']}",
            nickname=f"User {counter['n']}",
            referral_code=referral_code,
            commission_balance=commission_balance,
            total_commission_earned=(
                commission_balance
                if total_commission_earned is None
                else total_commission_earned
            ),
            is_active=is_active,
            is_banned=is_banned,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


@pytest.fixture
def balance_of(db_session):
    """Read a user's stored balance straight from the table."""

    async def _balance_of(user_id: int) -> Decimal:
        result = await db_session.execute(
            select(User.commission_balance).where(User.id == user_id)
        )
        return Decimal(str(result.scalar_one())).quantize(Decimal("0.01"))

    return _balance_of
