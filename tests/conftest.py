"""Shared pytest fixtures for AquaLab test suite.

Provides:
- db_engine: in-memory SQLite async engine with all tables
- db_session: SAVEPOINT-isolated async session (app commits don't leak)
- openai_stub / llm_client: LLMClient wired to a mocked AsyncOpenAI
- make_completion: builds chat-completion objects for the stub
- client: AsyncClient with DB and LLM dependency overrides
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from src.agents.llm_client import LLMClient
from src.db.session import Base, get_async_session
import src.db.tables  # noqa: F401


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine with all tables."""
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Provide a SAVEPOINT-isolated session.

    The outer transaction is never committed; it rolls back at teardown.
    Application code calling session.commit() triggers a SAVEPOINT release,
    which is then restarted so subsequent operations stay in the same
    outer transaction.
    """
    async with db_engine.connect() as conn:
        trans = await conn.begin()
        session = AsyncSession(bind=conn, expire_on_commit=False)

        nested = await conn.begin_nested()

        @event.listens_for(session.sync_session, "after_transaction_end")
        def restart_savepoint(sync_session, transaction):  # noqa: ARG001
            nonlocal nested
            if transaction.nested and not transaction._parent.nested:
                nested = conn.sync_connection.begin_nested()

        yield session

        await session.close()
        await trans.rollback()


# ---------------------------------------------------------------------------
# Reasoning service stubs
# ---------------------------------------------------------------------------


def _completion(content: str | None, *, prompt_tokens: int = 120,
                completion_tokens: int = 40) -> SimpleNamespace:
    """Shape-compatible stand-in for openai ChatCompletion."""
    return SimpleNamespace(
        model="gpt-4o-mini",
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
        ),
    )


@pytest.fixture
def make_completion():
    return _completion


@pytest.fixture
def openai_stub() -> MagicMock:
    """AsyncOpenAI double; set ``chat.completions.create.side_effect`` per test."""
    stub = MagicMock()
    stub.chat.completions.create = AsyncMock()
    return stub


@pytest.fixture
def llm_client(openai_stub: MagicMock) -> LLMClient:
    return LLMClient(client=openai_stub, timeout=5.0)


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


@pytest.fixture
async def client(db_session, llm_client):
    """AsyncClient with session and LLM client overridden for testing."""
    from src.api.dependencies import get_llm_client
    from src.api.main import app

    async def _override_session():
        yield db_session

    app.dependency_overrides[get_async_session] = _override_session
    app.dependency_overrides[get_llm_client] = lambda: llm_client

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Seeded records
# ---------------------------------------------------------------------------


@pytest.fixture
async def user_row(db_session):
    from src.repositories.users import UserRepository

    return await UserRepository(db_session).create(email="analyst@example.org")


@pytest.fixture
async def experiment_row(db_session, user_row):
    """A freshly created experiment: name and description only."""
    from src.repositories.experiments import ExperimentRepository

    return await ExperimentRepository(db_session).create(
        user_id=user_row.user_id,
        name="Pasig River, station 3",
        description="Weekly grab sample",
    )
