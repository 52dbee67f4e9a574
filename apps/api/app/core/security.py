"""Password hashing and one-time passcodes."""

from __future__ import annotations

import secrets

from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHash, VerificationError

_hasher = PasswordHasher(type=Type.ID)


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("password_blank")
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return _hasher.verify(password_hash, password)
    except (InvalidHash, VerificationError):
        # Mismatch, or an unrecognized or corrupt hash.
        return False


def generate_otp() -> str:
    """Six decimal digits, never starting with zero."""
    return str(100000 + secrets.randbelow(900000))
