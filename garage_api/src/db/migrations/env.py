"""Alembic environment for the garage schema; online runs go through the async engine."""
from __future__ import annotations

import asyncio
import sys
from pathlib import Path

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

# Make `src.*` importable when alembic is invoked from outside garage_api/.
GARAGE_API_ROOT = Path(__file__).resolve().parents[3]
if str(GARAGE_API_ROOT) not in sys.path:
    sys.path.insert(0, str(GARAGE_API_ROOT))

from src.db import models  # noqa: E402,F401
from src.db.base import Base  # noqa: E402
from src.db.config import get_settings  # noqa: E402

settings = get_settings()
target_metadata = Base.metadata


def _configure(**kwargs) -> None:
    # SQLite cannot ALTER most constraints in place; batch mode rebuilds tables.
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=settings.is_sqlite,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting."""
    _configure(
        url=context.config.get_main_option("sqlalchemy.url") or settings.sync_database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = create_async_engine(settings.async_database_url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
