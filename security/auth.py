"""
security/auth.py
-----------------
Password hashing and session token primitives.
Passwords are stored as bcrypt hashes; session tokens are random and opaque.
"""

import secrets

import bcrypt

from config import BCRYPT_ROUNDS


def hash_password(password: str) -> str:
    """
    Hash a plaintext password with a fresh salt.

    Args:
        password: The plaintext password.

    Returns:
        The bcrypt hash as a UTF-8 string, ready to store.
    """
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    """Returns True if `password` matches the stored bcrypt hash."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed hash in storage
        return False


def new_session_token() -> str:
    """A 256-bit URL-safe random token."""
    return secrets.token_urlsafe(32)
