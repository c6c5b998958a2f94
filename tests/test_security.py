"""
Credential workflow tests — hashing, verification and the rotation policy
("reject the new password if it equals the current one").
"""
import pytest

from app.entities import HashedPassword, User
from app.errors import PolicyViolation, ValidationError
from app.security import (
    Verification,
    check_password,
    hash_password,
    rotate_password,
    verify_password,
)


def test_hash_is_salted_and_not_plaintext():
    first = hash_password("hunter2")
    second = hash_password("hunter2")
    assert isinstance(first, HashedPassword)
    assert str(first) != "hunter2"
    assert str(first).startswith("$2")
    # Fresh salt per hash.
    assert first != second


def test_hash_uses_configured_cost():
    assert str(hash_password("hunter2", rounds=5)).startswith("$2b$05$")


def test_verify_matches_only_the_original_password():
    hashed = hash_password("hunter2")
    assert verify_password("hunter2", hashed) is True
    assert verify_password("wrong", hashed) is False


def test_verify_accepts_raw_hash_string():
    hashed = hash_password("hunter2")
    assert verify_password("hunter2", str(hashed)) is True


def test_malformed_hash_is_rejected_not_raised():
    assert verify_password("hunter2", "not-a-bcrypt-hash") is False
    assert check_password("hunter2", "not-a-bcrypt-hash") is Verification.REJECTED


def test_check_password_states():
    hashed = hash_password("hunter2")
    assert check_password("hunter2", hashed) is Verification.VERIFIED
    assert check_password("wrong", hashed) is Verification.REJECTED


def test_passwords_longer_than_72_bytes_are_truncated():
    long_password = "x" * 100
    hashed = hash_password(long_password)
    assert verify_password(long_password, hashed)
    assert verify_password("x" * 72, hashed)


# ---------------------------------------------------------------------------
# Rotation
# ---------------------------------------------------------------------------

def test_rotate_to_same_password_is_a_policy_violation():
    user = User(id=1, email="a@b.com", password=hash_password("hunter2"))
    with pytest.raises(PolicyViolation, match="cannot be the same"):
        rotate_password(user, "hunter2")


def test_rotate_to_new_password_returns_new_hash():
    old_hash = hash_password("hunter2")
    user = User(id=1, email="a@b.com", password=old_hash)

    rotated = rotate_password(user, "correct horse")

    assert rotated.id == 1
    assert rotated.password != old_hash
    assert verify_password("correct horse", rotated.password)
    assert not verify_password("hunter2", rotated.password)
    # The input is left untouched.
    assert user.password == old_hash


def test_rotate_rejects_empty_new_password():
    user = User(id=1, email="a@b.com", password=hash_password("hunter2"))
    with pytest.raises(ValidationError):
        rotate_password(user, "")


def test_rotate_requires_loaded_hash():
    with pytest.raises(ValidationError):
        rotate_password(User(id=1, email="a@b.com"), "new-password")
