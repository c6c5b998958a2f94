"""
In-process storage with the same contract as ``SQLStorage``.

Rows are kept as column-name dicts and go through the same decoders, so
uniqueness (``Conflict``), missing rows (``NotFound``), all-or-nothing reads
(``StorageError``) and the deadline (``Timeout``) behave as they do against
the database.  ``latency`` adds a simulated round trip to every operation.
Used by the service tests and handy for running the API without a database.
"""
from __future__ import annotations

import asyncio
import itertools
from datetime import date
from typing import Any, Callable, Iterable, TypeVar

from app.entities import DEFAULT_ROLES, Post, Role, User, USER_ROLE_ID
from app.errors import Conflict, NotFound
from app.repositories.base import (
    Clock,
    decode_all,
    decode_post,
    decode_role,
    decode_user,
    within_deadline,
)

T = TypeVar("T")


class InMemoryStorage:
    def __init__(
        self,
        timeout: float = 3.0,
        latency: float = 0.0,
        default_role_id: int = USER_ROLE_ID,
        today: Clock = date.today,
        roles: Iterable[Role] = DEFAULT_ROLES,
    ) -> None:
        self._timeout = timeout
        self.latency = latency
        self._default_role_id = default_role_id
        self._today = today
        self.posts: dict[int, dict[str, Any]] = {}
        self.users: dict[int, dict[str, Any]] = {}
        self.roles: dict[int, dict[str, Any]] = {
            role.id: {"id": role.id, "role_name": role.role_name} for role in roles
        }
        self._post_ids = itertools.count(1)
        self._user_ids = itertools.count(1)

    async def _execute(self, operation: str, work: Callable[[], T]) -> T:
        async def round_trip() -> T:
            if self.latency:
                await asyncio.sleep(self.latency)
            return work()

        return await within_deadline(operation, round_trip(), self._timeout)

    @staticmethod
    def _ensure_unique(table: dict[int, dict[str, Any]], column: str, value: Any, own_id: int | None = None) -> None:
        for row_id, row in table.items():
            if row_id != own_id and row[column] == value:
                raise Conflict(f"a record with {column}={value!r} already exists")

    @staticmethod
    def _row(table: dict[int, dict[str, Any]], entity: str, row_id: int | None) -> dict[str, Any]:
        row = table.get(row_id) if row_id is not None else None
        if row is None:
            raise NotFound(entity, row_id)
        return row

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    async def create_post(self, post: Post) -> Post:
        def work() -> Post:
            self._ensure_unique(self.posts, "title", post.title)
            today = self._today()
            row = {
                "id": next(self._post_ids),
                "title": post.title,
                "author_id": post.author_id,
                "md_body": post.body,
                "created_at": today,
                "updated_at": today,
            }
            self.posts[row["id"]] = row
            return decode_post(row)

        return await self._execute("create_post", work)

    async def get_all_posts(self) -> list[Post]:
        return await self._execute(
            "get_all_posts",
            lambda: decode_all([self.posts[key] for key in sorted(self.posts)], decode_post),
        )

    async def get_one_post(self, post_id: int) -> Post:
        return await self._execute(
            "get_one_post",
            lambda: decode_post(self._row(self.posts, "post", post_id)),
        )

    async def update_post(self, post: Post) -> Post:
        def work() -> Post:
            row = self._row(self.posts, "post", post.id)
            self._ensure_unique(self.posts, "title", post.title, own_id=post.id)
            row.update(title=post.title, md_body=post.body, updated_at=self._today())
            return decode_post(row)

        return await self._execute("update_post", work)

    async def delete_post(self, post_id: int) -> None:
        def work() -> None:
            self._row(self.posts, "post", post_id)
            del self.posts[post_id]

        await self._execute("delete_post", work)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def create_user(self, user: User) -> User:
        def work() -> User:
            self._ensure_unique(self.users, "email", user.email)
            today = self._today()
            row = {
                "id": next(self._user_ids),
                "email": user.email,
                "password": str(user.password),
                "username": user.username,
                "first_name": user.first_name,
                "last_name": user.last_name,
                "role_id": self._default_role_id,
                "created_at": today,
                "updated_at": today,
            }
            self.users[row["id"]] = row
            return decode_user(row)

        return await self._execute("create_user", work)

    async def get_all_users(self) -> list[User]:
        return await self._execute(
            "get_all_users",
            lambda: decode_all([self.users[key] for key in sorted(self.users)], decode_user),
        )

    async def get_one_user(self, user_id: int) -> User:
        return await self._execute(
            "get_one_user",
            lambda: decode_user(self._row(self.users, "user", user_id)),
        )

    async def get_one_user_with_password(self, user_id: int) -> User:
        return await self._execute(
            "get_one_user_with_password",
            lambda: decode_user(self._row(self.users, "user", user_id), with_password=True),
        )

    async def update_user(self, user: User) -> User:
        def work() -> User:
            row = self._row(self.users, "user", user.id)
            self._ensure_unique(self.users, "email", user.email, own_id=user.id)
            row.update(
                email=user.email,
                username=user.username,
                first_name=user.first_name,
                last_name=user.last_name,
                updated_at=self._today(),
            )
            return decode_user(row)

        return await self._execute("update_user", work)

    async def update_password(self, user: User) -> None:
        def work() -> None:
            row = self._row(self.users, "user", user.id)
            row.update(password=str(user.password), updated_at=self._today())

        await self._execute("update_password", work)

    async def delete_user(self, user_id: int) -> None:
        def work() -> None:
            self._row(self.users, "user", user_id)
            del self.users[user_id]

        await self._execute("delete_user", work)

    # ------------------------------------------------------------------
    # Roles
    # ------------------------------------------------------------------

    async def get_all_roles(self) -> list[Role]:
        return await self._execute(
            "get_all_roles",
            lambda: decode_all([self.roles[key] for key in sorted(self.roles)], decode_role),
        )

    async def get_one_role(self, role_id: int) -> Role:
        return await self._execute(
            "get_one_role",
            lambda: decode_role(self._row(self.roles, "role", role_id)),
        )
