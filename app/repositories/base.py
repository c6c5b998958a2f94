"""
Repository contract shared by every storage backend.

- ``PostRepository`` / ``UserRepository`` / ``RoleRepository`` are the
  capability interfaces the domain services depend on.
- ``within_deadline`` bounds a single operation; expiry cancels the in-flight
  work and raises ``Timeout``.
- ``decode_*`` turn a row mapping (column name -> value) into an entity and
  raise ``StorageError`` for a row that cannot be decoded.  ``decode_all``
  decodes a whole result set before returning any of it.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, Awaitable, Callable, Iterable, Mapping, Protocol, TypeVar

from app.entities import HashedPassword, Post, Role, User
from app.errors import StorageError, Timeout

logger = logging.getLogger(__name__)

T = TypeVar("T")

Row = Mapping[str, Any]


# ---------------------------------------------------------------------------
# Capability interfaces
# ---------------------------------------------------------------------------

class PostRepository(Protocol):
    async def create_post(self, post: Post) -> Post: ...

    async def get_all_posts(self) -> list[Post]: ...

    async def get_one_post(self, post_id: int) -> Post: ...

    async def update_post(self, post: Post) -> Post: ...

    async def delete_post(self, post_id: int) -> None: ...


class UserRepository(Protocol):
    async def create_user(self, user: User) -> User: ...

    async def get_all_users(self) -> list[User]: ...

    async def get_one_user(self, user_id: int) -> User: ...

    async def get_one_user_with_password(self, user_id: int) -> User: ...

    async def update_user(self, user: User) -> User: ...

    async def update_password(self, user: User) -> None: ...

    async def delete_user(self, user_id: int) -> None: ...


class RoleRepository(Protocol):
    async def get_all_roles(self) -> list[Role]: ...

    async def get_one_role(self, role_id: int) -> Role: ...


class Storage(PostRepository, UserRepository, RoleRepository, Protocol):
    """Everything the application needs from one backing store."""


Clock = Callable[[], date]


# ---------------------------------------------------------------------------
# Deadline
# ---------------------------------------------------------------------------

async def within_deadline(operation: str, awaitable: Awaitable[T], timeout: float) -> T:
    """
    Await *awaitable* for at most *timeout* seconds, cancelling it on expiry.

    The work runs in the caller's task, so context variables it sets (the
    per-request query counter) stay visible to the caller.
    """
    try:
        async with asyncio.timeout(timeout):
            return await awaitable
    except TimeoutError as exc:
        logger.warning("%s exceeded its %.2fs deadline; query cancelled", operation, timeout)
        raise Timeout(operation, timeout) from exc


# ---------------------------------------------------------------------------
# Row decoding
# ---------------------------------------------------------------------------

def _column(row: Row, name: str) -> Any:
    try:
        value = row[name]
    except KeyError as exc:
        raise StorageError(f"row is missing column {name!r}") from exc
    if value is None:
        raise StorageError(f"column {name!r} is null")
    return value


def decode_post(row: Row) -> Post:
    return Post(
        id=_column(row, "id"),
        title=_column(row, "title"),
        author_id=_column(row, "author_id"),
        body=_column(row, "md_body"),
        created_at=_column(row, "created_at"),
        updated_at=_column(row, "updated_at"),
    )


def decode_user(row: Row, with_password: bool = False) -> User:
    return User(
        id=_column(row, "id"),
        email=_column(row, "email"),
        password=HashedPassword(_column(row, "password")) if with_password else None,
        username=_column(row, "username"),
        first_name=_column(row, "first_name"),
        last_name=_column(row, "last_name"),
        role_id=_column(row, "role_id"),
        created_at=_column(row, "created_at"),
        updated_at=_column(row, "updated_at"),
    )


def decode_role(row: Row) -> Role:
    return Role(id=_column(row, "id"), role_name=_column(row, "role_name"))


def decode_all(rows: Iterable[Row], decode: Callable[[Row], T]) -> list[T]:
    """Decode every row or none: one bad row fails the whole read."""
    return [decode(row) for row in rows]
