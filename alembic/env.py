"""Alembic environment — runs Kondo schema migrations on the async engine.

Invariants:
    - Base.metadata is populated from kondo.models before any migration runs
    - The URL comes from DATABASE_URL through kondo.config.Settings, so migrations
      and the app always target the same database with the same driver
    - alembic.ini's sqlalchemy.url is used only when DATABASE_URL is unset

Design Decisions:
    - Settings reused over a second URL parser: postgres:// -> postgresql+asyncpg://
      lives in one validator (config.py)
    - compare_type on: column type drift (e.g. artifact Text/LargeBinary) shows up
      in autogenerate
    - SQLite targets use batch mode so ALTER-heavy migrations stay portable
"""

import asyncio
import os
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

from kondo.config import Settings
from kondo.db.base import Base
import kondo.models  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    if os.environ.get("DATABASE_URL"):
        return Settings().database_url
    return config.get_main_option("sqlalchemy.url")


def _configure(url: str, **kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=url.startswith("sqlite"),
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit SQL without a live connection."""
    url = _database_url()
    _configure(
        url, url=url, literal_binds=True, dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_sync_migrations(connection: Connection) -> None:
    _configure(connection.engine.url.drivername, connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = _database_url()
    connectable = async_engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    async with connectable.connect() as connection:
        await connection.run_sync(_run_sync_migrations)
    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
