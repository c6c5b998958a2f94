"""
Domain entities: plain records shared by every layer.

They carry no behaviour and know nothing about SQL or HTTP.  Identity and
timestamps are filled in by the repository; callers leave them unset.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

ADMIN_ROLE_ID = 1
USER_ROLE_ID = 2


@dataclass(frozen=True)
class HashedPassword:
    """A bcrypt hash, as produced by ``app.security.hash_password``."""

    value: str = field(repr=False)

    def __str__(self) -> str:
        return self.value


@dataclass
class Post:
    title: str
    body: str
    author_id: int = 0
    id: int | None = None
    created_at: date | None = None
    updated_at: date | None = None


@dataclass
class User:
    email: str
    password: HashedPassword | None = field(default=None, repr=False)
    username: str = ""
    first_name: str = ""
    last_name: str = ""
    role_id: int | None = None
    id: int | None = None
    created_at: date | None = None
    updated_at: date | None = None


@dataclass
class Role:
    id: int
    role_name: str


# Declared for the schema only; no operation persists comments yet.
@dataclass
class Comment:
    body: str
    user_id: int | None = None
    post_id: int | None = None
    id: int | None = None
    created_at: date | None = None
    updated_at: date | None = None


DEFAULT_ROLES: tuple[Role, ...] = (
    Role(id=ADMIN_ROLE_ID, role_name="admin"),
    Role(id=USER_ROLE_ID, role_name="user"),
)
