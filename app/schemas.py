from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# --- Envelope ---

def envelope(data: Any, status: str = "success") -> dict:
    """Wrap a payload in the ``{"status": ..., "data": ...}`` body every route returns."""
    return {"status": status, "data": data}


# --- Post ---

class PostCreate(BaseModel):
    title: str = ""
    md_body: str = ""
    author_id: int = 0


class PostUpdate(BaseModel):
    # The author is fixed at creation.
    title: str | None = None
    md_body: str | None = None


class PostResponse(BaseModel):
    id: int
    title: str
    # Read from the entity's ``body`` attribute, published as ``md_body``.
    md_body: str = Field(validation_alias="body")
    author_id: int
    created_at: date
    updated_at: date
    model_config = ConfigDict(from_attributes=True)


# --- User ---

class UserCreate(BaseModel):
    email: str = ""
    password: str = ""
    username: str = ""
    first_name: str = ""
    last_name: str = ""


class UserUpdate(BaseModel):
    email: str | None = None
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None


class PasswordUpdate(BaseModel):
    password: str = ""


class UserResponse(BaseModel):
    # No password field: hashes never leave the service through the API.
    id: int
    email: str
    role_id: int
    username: str
    first_name: str
    last_name: str
    created_at: date
    updated_at: date
    model_config = ConfigDict(from_attributes=True)
