"""
Test infrastructure for the blog API.

Strategy
--------
- bcrypt runs at its minimum cost (``BCRYPT_ROUNDS=4``); the variable is set
  before ``app`` is imported so ``Settings`` picks it up.
- Repository tests run ``SQLStorage`` against SQLite in-memory via aiosqlite.
  StaticPool keeps every task on the one connection that holds the database;
  each test opens and disposes its own ``Database`` so state never leaks.
- Service tests use ``InMemoryStorage``, which shares the decoders and the
  deadline wrapper with the SQL backend.
- HTTP tests drive the real app through httpx's ASGITransport.  The transport
  does not run the lifespan, so the fixture wires the services onto
  ``app.state`` itself, backed by the SQLite storage.
"""
import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import insert  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Database, open_database  # noqa: E402
from app.entities import DEFAULT_ROLES  # noqa: E402
from app.main import app  # noqa: E402
from app.models import RoleRecord  # noqa: E402
from app.repositories import InMemoryStorage, SQLStorage  # noqa: E402
from app.services import PostService, UserService  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ---------------------------------------------------------------------------
# Storage fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def database() -> Database:
    """A fresh in-memory database with all tables and the two roles."""
    async with open_database(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    ) as db:
        await db.create_all()
        async with db.sessions() as session, session.begin():
            await session.execute(
                insert(RoleRecord),
                [{"id": r.id, "role_name": r.role_name} for r in DEFAULT_ROLES],
            )
        yield db


@pytest_asyncio.fixture
async def storage(database: Database) -> SQLStorage:
    return SQLStorage(database)


@pytest_asyncio.fixture
async def memory_storage() -> InMemoryStorage:
    return InMemoryStorage()


# ---------------------------------------------------------------------------
# Service fixtures (in-memory backend)
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def post_service(memory_storage: InMemoryStorage) -> PostService:
    return PostService(memory_storage)


@pytest_asyncio.fixture
async def user_service(memory_storage: InMemoryStorage) -> UserService:
    return UserService(memory_storage)


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def async_client(storage: SQLStorage) -> AsyncClient:
    """httpx.AsyncClient wired to the FastAPI app, backed by SQLite storage."""
    app.state.post_service = PostService(storage)
    app.state.user_service = UserService(storage)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
