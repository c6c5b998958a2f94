"""Alembic environment for the blog schema (posts, users, roles, comments).

Offline mode renders SQL for review; online mode runs the migrations over
the same async ``Database`` handle the application uses.
"""

import asyncio
from logging.config import fileConfig

from alembic import context

import app.models  # noqa: F401  (registers every table on Base.metadata)
from app.config import settings
from app.database import Base, open_database

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# One source of truth for credentials: Settings (.env / environment).
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit the migration SQL without connecting."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Hand Alembic a sync connection borrowed from the async pool."""
    async with open_database(settings.DATABASE_URL) as database:
        async with database.engine.connect() as connection:
            await connection.run_sync(do_run_migrations)


def run_migrations_online() -> None:
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
