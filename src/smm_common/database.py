"""Async engine and session plumbing shared by every module.

One session per request (get_db_session). Services own commit/rollback;
the session is closed, and any open transaction rolled back, when the
request finishes.
"""

from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings


class Base(DeclarativeBase):
    """Declarative base for the ORM-mapped tables (users, categories, services).

    accounts, ledger_entries, balance_requests and orders are accessed with
    raw SQL and have no ORM mapping.
    """


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one AsyncSession per request."""
    async with async_session_factory() as session:
        yield session


async def ping_database() -> None:
    """Round-trip to PostgreSQL; raises if the server is unreachable."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
