"""Database engine and request-scoped sessions for AquaLab.

One engine per process, built from DATABASE_URL (asyncpg in deployments,
aiosqlite in tests). Each HTTP request gets one AsyncSession through
``get_async_session``. The experiment update, its generated text and the
similarity analysis are flushed by the repositories and committed together
when the request finishes; any exception rolls all of it back.

SQL statement echo follows LOG_LEVEL=DEBUG.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from src.config.settings import LogLevel, get_settings


class Base(DeclarativeBase):
    """Declarative base for UserRow, ExperimentRow and ExperimentBankRow."""


_settings = get_settings()

engine = create_async_engine(
    _settings.DATABASE_URL,
    echo=_settings.LOG_LEVEL == LogLevel.DEBUG,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request, committed once.

    Repositories never commit; they only add and flush.
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        await session.commit()
