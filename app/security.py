"""
Credential workflow: password hashing, verification and rotation.

Hashes are bcrypt with a per-hash salt and an adaptive cost
(``settings.BCRYPT_ROUNDS``, 12 by default).  The same ``hash_password`` is
used when a user is created and when a password is rotated.

Rotation policy: a new password is accepted only if it does *not* verify
against the stored hash.  Re-using the current password is a
``PolicyViolation``.  The old password is not asked for.
"""
import enum
from dataclasses import replace

import bcrypt

from app.config import settings
from app.entities import HashedPassword, User
from app.errors import PolicyViolation, ValidationError

# bcrypt only looks at the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72


class Verification(str, enum.Enum):
    VERIFIED = "verified"
    REJECTED = "rejected"


def _encode(plain_password: str) -> bytes:
    return plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(plain_password: str, rounds: int | None = None) -> HashedPassword:
    """Hash a plain-text password for storage."""
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return HashedPassword(bcrypt.hashpw(_encode(plain_password), salt).decode("utf-8"))


def verify_password(plain_password: str, hashed: HashedPassword | str) -> bool:
    """Verify a plain password against a stored hash; a malformed hash never matches."""
    try:
        return bcrypt.checkpw(_encode(plain_password), str(hashed).encode("utf-8"))
    except (ValueError, TypeError):
        return False


def check_password(plain_password: str, hashed: HashedPassword | str) -> Verification:
    if verify_password(plain_password, hashed):
        return Verification.VERIFIED
    return Verification.REJECTED


def rotate_password(user: User, new_password: str, rounds: int | None = None) -> User:
    """
    Return a copy of *user* carrying the hash of *new_password*.

    *user* must come from ``get_one_with_password``.  Raises
    ``PolicyViolation`` when *new_password* is the current password, in which
    case nothing should be written.
    """
    if not new_password:
        raise ValidationError("new password is required", field="password")
    if user.password is None:
        raise ValidationError("current password hash must be loaded before rotation", field="password")

    if check_password(new_password, user.password) is Verification.VERIFIED:
        raise PolicyViolation("new password cannot be the same as the old password")

    return replace(user, password=hash_password(new_password, rounds=rounds))
