"""
Relational storage backed by the async SQLAlchemy engine in ``Database``.

Each public method is one operation: one transaction, parameterized Core
statements, and the ``within_deadline`` bound.  Driver errors are translated
here so callers only ever see the ``app.errors`` taxonomy:

- unique-constraint ``IntegrityError``  -> ``Conflict``
- any other ``SQLAlchemyError``         -> ``StorageError``
- zero rows on a single-row statement   -> ``NotFound``

Writes stamp ``updated_at`` (and ``created_at`` on insert) with the
repository's clock; callers never supply timestamps.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Awaitable, Callable, TypeVar

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Database
from app.entities import Post, Role, User, USER_ROLE_ID
from app.errors import Conflict, NotFound, StorageError
from app.models import PostRecord, RoleRecord, UserRecord
from app.repositories.base import (
    Clock,
    decode_all,
    decode_post,
    decode_role,
    decode_user,
    within_deadline,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

posts = PostRecord.__table__
users = UserRecord.__table__
roles = RoleRecord.__table__

# The password column is only selected by get_one_user_with_password.
_PUBLIC_USER_COLUMNS = [column for column in users.c if column.name != "password"]

# PostgreSQL unique_violation
_UNIQUE_VIOLATION_SQLSTATE = "23505"


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    for attr in ("sqlstate", "pgcode"):
        if getattr(orig, attr, None) == _UNIQUE_VIOLATION_SQLSTATE:
            return True
    cause = getattr(orig, "__cause__", None)
    if getattr(cause, "sqlstate", None) == _UNIQUE_VIOLATION_SQLSTATE:
        return True
    # SQLite: "UNIQUE constraint failed: users.email"
    return "unique" in str(orig).lower()


class SQLStorage:
    def __init__(
        self,
        database: Database,
        timeout: float = 3.0,
        default_role_id: int = USER_ROLE_ID,
        today: Clock = date.today,
    ) -> None:
        self._sessions = database.sessions
        self._timeout = timeout
        self._default_role_id = default_role_id
        self._today = today

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    async def _execute(self, operation: str, work: Callable[[AsyncSession], Awaitable[T]]) -> T:
        async def in_transaction() -> T:
            async with self._sessions() as session:
                async with session.begin():
                    return await work(session)

        try:
            return await within_deadline(operation, in_transaction(), self._timeout)
        except IntegrityError as exc:
            if _is_unique_violation(exc):
                logger.warning("%s rejected by a uniqueness constraint: %s", operation, exc.orig)
                raise Conflict(f"{operation}: a record with the same unique value already exists") from exc
            logger.error("%s violated an integrity constraint: %s", operation, exc.orig)
            raise StorageError(f"{operation} failed: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            logger.error("%s failed: %s", operation, exc)
            raise StorageError(f"{operation} failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    async def create_post(self, post: Post) -> Post:
        today = self._today()
        stmt = (
            insert(posts)
            .values(
                title=post.title,
                author_id=post.author_id,
                md_body=post.body,
                created_at=today,
                updated_at=today,
            )
            .returning(*posts.c)
        )

        async def work(session: AsyncSession) -> Post:
            result = await session.execute(stmt)
            return decode_post(result.mappings().one())

        return await self._execute("create_post", work)

    async def get_all_posts(self) -> list[Post]:
        stmt = select(posts).order_by(posts.c.id)

        async def work(session: AsyncSession) -> list[Post]:
            result = await session.execute(stmt)
            return decode_all(result.mappings().all(), decode_post)

        return await self._execute("get_all_posts", work)

    async def get_one_post(self, post_id: int) -> Post:
        stmt = select(posts).where(posts.c.id == post_id)

        async def work(session: AsyncSession) -> Post:
            row = (await session.execute(stmt)).mappings().first()
            if row is None:
                raise NotFound("post", post_id)
            return decode_post(row)

        return await self._execute("get_one_post", work)

    async def update_post(self, post: Post) -> Post:
        stmt = (
            update(posts)
            .where(posts.c.id == post.id)
            .values(title=post.title, md_body=post.body, updated_at=self._today())
            .returning(*posts.c)
        )

        async def work(session: AsyncSession) -> Post:
            row = (await session.execute(stmt)).mappings().first()
            if row is None:
                raise NotFound("post", post.id)
            return decode_post(row)

        return await self._execute("update_post", work)

    async def delete_post(self, post_id: int) -> None:
        stmt = delete(posts).where(posts.c.id == post_id)

        async def work(session: AsyncSession) -> None:
            result = await session.execute(stmt)
            if result.rowcount == 0:
                raise NotFound("post", post_id)

        await self._execute("delete_post", work)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def create_user(self, user: User) -> User:
        today = self._today()
        stmt = (
            insert(users)
            .values(
                email=user.email,
                password=str(user.password),
                username=user.username,
                first_name=user.first_name,
                last_name=user.last_name,
                role_id=self._default_role_id,
                created_at=today,
                updated_at=today,
            )
            .returning(*_PUBLIC_USER_COLUMNS)
        )

        async def work(session: AsyncSession) -> User:
            result = await session.execute(stmt)
            return decode_user(result.mappings().one())

        return await self._execute("create_user", work)

    async def get_all_users(self) -> list[User]:
        stmt = select(*_PUBLIC_USER_COLUMNS).order_by(users.c.id)

        async def work(session: AsyncSession) -> list[User]:
            result = await session.execute(stmt)
            return decode_all(result.mappings().all(), decode_user)

        return await self._execute("get_all_users", work)

    async def get_one_user(self, user_id: int) -> User:
        stmt = select(*_PUBLIC_USER_COLUMNS).where(users.c.id == user_id)

        async def work(session: AsyncSession) -> User:
            row = (await session.execute(stmt)).mappings().first()
            if row is None:
                raise NotFound("user", user_id)
            return decode_user(row)

        return await self._execute("get_one_user", work)

    async def get_one_user_with_password(self, user_id: int) -> User:
        stmt = select(users).where(users.c.id == user_id)

        async def work(session: AsyncSession) -> User:
            row = (await session.execute(stmt)).mappings().first()
            if row is None:
                raise NotFound("user", user_id)
            return decode_user(row, with_password=True)

        return await self._execute("get_one_user_with_password", work)

    async def update_user(self, user: User) -> User:
        stmt = (
            update(users)
            .where(users.c.id == user.id)
            .values(
                email=user.email,
                username=user.username,
                first_name=user.first_name,
                last_name=user.last_name,
                updated_at=self._today(),
            )
            .returning(*_PUBLIC_USER_COLUMNS)
        )

        async def work(session: AsyncSession) -> User:
            row = (await session.execute(stmt)).mappings().first()
            if row is None:
                raise NotFound("user", user.id)
            return decode_user(row)

        return await self._execute("update_user", work)

    async def update_password(self, user: User) -> None:
        stmt = (
            update(users)
            .where(users.c.id == user.id)
            .values(password=str(user.password), updated_at=self._today())
        )

        async def work(session: AsyncSession) -> None:
            result = await session.execute(stmt)
            if result.rowcount == 0:
                raise NotFound("user", user.id)

        await self._execute("update_password", work)

    async def delete_user(self, user_id: int) -> None:
        stmt = delete(users).where(users.c.id == user_id)

        async def work(session: AsyncSession) -> None:
            result = await session.execute(stmt)
            if result.rowcount == 0:
                raise NotFound("user", user_id)

        await self._execute("delete_user", work)

    # ------------------------------------------------------------------
    # Roles
    # ------------------------------------------------------------------

    async def get_all_roles(self) -> list[Role]:
        stmt = select(roles).order_by(roles.c.id)

        async def work(session: AsyncSession) -> list[Role]:
            result = await session.execute(stmt)
            return decode_all(result.mappings().all(), decode_role)

        return await self._execute("get_all_roles", work)

    async def get_one_role(self, role_id: int) -> Role:
        stmt = select(roles).where(roles.c.id == role_id)

        async def work(session: AsyncSession) -> Role:
            row = (await session.execute(stmt)).mappings().first()
            if row is None:
                raise NotFound("role", role_id)
            return decode_role(row)

        return await self._execute("get_one_role", work)
