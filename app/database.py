from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.middleware import install_query_counter


class Base(DeclarativeBase):
    pass


class Database:
    """
    Handle on the process-wide connection pool.

    Built once at startup (see ``open_database`` and the app lifespan) and
    passed to the repository; there is no module-level engine.  The pool is
    safe for concurrent acquisition by many in-flight requests.
    """

    def __init__(self, url: str, *, echo: bool = False, **engine_kwargs: Any) -> None:
        self.url = url
        self.engine: AsyncEngine = create_async_engine(
            url,
            echo=echo,
            pool_pre_ping=True,
            **engine_kwargs,
        )
        # Per-request SQL query counter, surfaced by the timing middleware.
        install_query_counter(self.engine)
        self.sessions = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_all(self) -> None:
        """Create any missing tables (development and tests; deployments use Alembic)."""
        import app.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        import app.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


@asynccontextmanager
async def open_database(url: str, **kwargs: Any) -> AsyncIterator[Database]:
    """Open the pool for the duration of the block and always release it."""
    database = Database(url, **kwargs)
    try:
        yield database
    finally:
        await database.dispose()
