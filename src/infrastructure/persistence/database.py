"""
Async SQLAlchemy engine and session dependencies.

The helfer table is shared with the case-management backend; the
helper_document table belongs to this service.
"""
from typing import Any

from sqlalchemy.ext.asyncio import (AsyncSession, async_sessionmaker,
                                    create_async_engine)
from sqlalchemy.orm import DeclarativeBase

from src.infrastructure.config.settings import get_settings

settings = get_settings()


def _engine_options(database_url: str) -> dict[str, Any]:
    """Pool tuning for PostgreSQL; other drivers keep SQLAlchemy defaults"""
    if not database_url.startswith("postgresql"):
        return {}
    return {
        "pool_size": 10,
        "max_overflow": 20,
        "pool_recycle": 1800,
        "connect_args": {"command_timeout": 30},
    }


engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    pool_pre_ping=True,
    **_engine_options(settings.database_url),
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    """Declarative base for document service models"""


async def get_db():
    """Session for read-only requests (never commits)"""
    async with AsyncSessionLocal() as session:
        yield session


async def get_db_transactional():
    """
    Session wrapped in a transaction for write requests.

    Commits when the request handler returns, rolls back if it raises. A
    commit failure here surfaces after the blob write has already happened;
    reconciliation picks up the resulting orphan.
    """
    async with AsyncSessionLocal() as session:
        async with session.begin():
            yield session
