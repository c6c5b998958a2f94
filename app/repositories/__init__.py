# Repository package.
#
# The only layer that touches storage.  Services depend on the capability
# interfaces in ``base``; two backends implement them:
#
#   sql     — SQLStorage, async SQLAlchemy over the Database connection pool
#   memory  — InMemoryStorage, dict-backed double with the same contract
#
# Every operation runs under a deadline and reports failures through the
# ``app.errors`` taxonomy (NotFound, Conflict, Timeout, StorageError).
from app.repositories.base import PostRepository, RoleRepository, Storage, UserRepository
from app.repositories.memory import InMemoryStorage
from app.repositories.sql import SQLStorage

__all__ = [
    "InMemoryStorage",
    "PostRepository",
    "RoleRepository",
    "SQLStorage",
    "Storage",
    "UserRepository",
]
