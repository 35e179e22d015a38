"""Alembic environment for the AquaLab schema (users, experiments, bank).

The database URL comes from DATABASE_URL (pydantic-settings) unless one is
passed on the command line:

    alembic upgrade head
    alembic -x url=sqlite+aiosqlite:///./aqualab.db upgrade head

SQLite URLs run in batch mode so ALTER-style operations work there too.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from src.config.settings import get_settings
from src.db.session import Base
# Registers UserRow, ExperimentRow and ExperimentBankRow on Base.metadata.
import src.db.tables  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    return context.get_x_argument(as_dictionary=True).get("url") or get_settings().DATABASE_URL


def _context_options(url: str) -> dict:
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline(url: str) -> None:
    """Emit the migration SQL to stdout without connecting."""
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_context_options(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection, url: str) -> None:
    context.configure(connection=connection, **_context_options(url))
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online(url: str) -> None:
    engine = create_async_engine(url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate, url)
    finally:
        await engine.dispose()


_url = _database_url()
if context.is_offline_mode():
    run_migrations_offline(_url)
else:
    asyncio.run(run_migrations_online(_url))
