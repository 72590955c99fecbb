"""Password hashing and access-token helpers."""
from __future__ import annotations

from datetime import timedelta
from typing import Any

import bcrypt
from jose import JWTError, jwt

from echo_feedback.core.settings import settings
from echo_feedback.db.time import utcnow

# bcrypt only looks at the first 72 bytes of a password.
PASSWORD_MAX_BYTES = 72


def hash_password(password: str, *, rounds: int | None = None) -> str:
    """Return a salted bcrypt hash of ``password``."""
    salt = bcrypt.gensalt(rounds=rounds or settings.password_hash_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check ``password`` against a hash produced by :func:`hash_password`.

    Returns False for malformed hashes instead of raising.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(subject: str, *, is_admin: bool = False) -> str:
    """Issue a signed JWT for ``subject`` (the public ``U-XXXX`` user id)."""
    expire = utcnow() + timedelta(minutes=settings.access_token_expire_minutes)
    payload = {"sub": subject, "adm": is_admin, "exp": expire}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Return the token claims, or None when the token is invalid or expired."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
