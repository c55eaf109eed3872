import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context
from admin_api.forge.sdk.db import models
from admin_api.forge.sdk.settings_manager import SettingsManager

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# tasks and task_runs, needed for autogenerate
target_metadata = models.Base.metadata

config.set_main_option("sqlalchemy.url", SettingsManager.get_settings().DATABASE_STRING)


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode, emitting SQL to the script output instead of executing it."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    connectable = create_async_engine(
        config.get_main_option("sqlalchemy.url"),
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
