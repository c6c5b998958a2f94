"""
User service — validation, normalization and credential plumbing for User.

The service never hashes and never decides whether a password may change:

- ``create`` expects a ``HashedPassword`` (see ``app.security.hash_password``)
  and refuses anything else, so plaintext cannot reach storage.
- ``update_password`` stores whatever rotation ``app.security.rotate_password``
  already approved.
- ``update`` expects the caller to have merged partial changes against the
  stored user; no fetch happens here.

``get_one_with_password`` is the only read that returns the hash and exists
for the rotation flow alone.
"""
from dataclasses import replace

from app.entities import HashedPassword, User
from app.errors import ValidationError
from app.repositories import UserRepository


def _require_hashed(user: User) -> None:
    if not user.password:
        raise ValidationError("password is required", field="password")
    if not isinstance(user.password, HashedPassword):
        raise ValidationError("password must be hashed before it is stored", field="password")


class UserService:
    def __init__(self, storage: UserRepository) -> None:
        self.storage = storage

    async def create(self, user: User) -> User:
        if not user.email:
            raise ValidationError("email is required", field="email")
        _require_hashed(user)

        return await self.storage.create_user(replace(user, email=user.email.lower()))

    async def get_all(self) -> list[User]:
        return await self.storage.get_all_users()

    async def get_one(self, user_id: int) -> User:
        return await self.storage.get_one_user(user_id)

    async def get_one_with_password(self, user_id: int) -> User:
        return await self.storage.get_one_user_with_password(user_id)

    async def update(self, user: User) -> User:
        if not user.email:
            raise ValidationError("email cannot be empty", field="email")
        normalized = replace(
            user,
            email=user.email.lower(),
            username=user.username.lower(),
            first_name=user.first_name.lower(),
            last_name=user.last_name.lower(),
        )
        return await self.storage.update_user(normalized)

    async def update_password(self, user: User) -> None:
        _require_hashed(user)
        await self.storage.update_password(user)

    async def delete(self, user_id: int) -> None:
        await self.storage.delete_user(user_id)
