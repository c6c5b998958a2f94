"""
ORM table definitions.

Only the repository and the schema tooling (``Database.create_all``, Alembic)
import these; services and routers work with ``app.entities`` instead.
Timestamps are ``Date`` columns: the store keeps day precision only.
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from sqlalchemy import Date, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


# ---------------------------------------------------------------------------
# Post
# ---------------------------------------------------------------------------
class PostRecord(Base):
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    # Plain integer, no foreign key: an absent author is stored as 0.
    author_id: Mapped[int] = mapped_column(Integer, nullable=False)
    md_body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[date] = mapped_column(Date, nullable=False)
    updated_at: Mapped[date] = mapped_column(Date, nullable=False)


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------
class UserRecord(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    role_id: Mapped[int] = mapped_column(Integer, nullable=False)
    username: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[date] = mapped_column(Date, nullable=False)
    updated_at: Mapped[date] = mapped_column(Date, nullable=False)


# ---------------------------------------------------------------------------
# Role
# ---------------------------------------------------------------------------
class RoleRecord(Base):
    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    role_name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)


# ---------------------------------------------------------------------------
# Comment (table only; nothing reads or writes it yet)
# ---------------------------------------------------------------------------
class CommentRecord(Base):
    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    comment_body: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    post_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[date] = mapped_column(Date, nullable=False)
    updated_at: Mapped[date] = mapped_column(Date, nullable=False)
