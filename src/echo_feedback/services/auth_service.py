"""Registration, login and the seeded administrator account."""
from __future__ import annotations

import logging
import re
import secrets

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from echo_feedback.core import security
from echo_feedback.core.errors import (
    AuthenticationError,
    DuplicateError,
    NotFoundError,
    ValidationError,
)
from echo_feedback.db.time import utcnow
from echo_feedback.models import User

__all__ = [
    "generate_user_id",
    "register_user",
    "authenticate",
    "get_user_by_email",
    "ensure_admin_account",
]

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")
NAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6
USER_ID_ATTEMPTS = 10


def generate_user_id(db: Session) -> str:
    """Return an unused ``U-XXXX`` id.

    Four random digits are tried a handful of times before widening to six.
    """
    for _ in range(USER_ID_ATTEMPTS):
        candidate = f"U-{1000 + secrets.randbelow(9000)}"
        if db.query(User.id).filter(User.user_id == candidate).first() is None:
            return candidate
    while True:
        candidate = f"U-{100000 + secrets.randbelow(900000)}"
        if db.query(User.id).filter(User.user_id == candidate).first() is None:
            return candidate


def _normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def register_user(
    db: Session,
    *,
    first_name: str | None,
    last_name: str | None = "",
    email: str | None,
    password: str | None,
    is_admin: bool = False,
) -> User:
    """Create an account after validating every field.

    Raises:
        ValidationError: On a missing or malformed field.
        DuplicateError: If the email is already registered.
    """
    first = (first_name or "").strip()
    last = (last_name or "").strip()
    normalized_email = _normalize_email(email)

    if not first:
        raise ValidationError("First name is required")
    if len(first) > NAME_MAX_LENGTH or len(last) > NAME_MAX_LENGTH:
        raise ValidationError(f"Names must be at most {NAME_MAX_LENGTH} characters")
    if not normalized_email:
        raise ValidationError("Email is required")
    if not password:
        raise ValidationError("Password is required")
    if not EMAIL_PATTERN.match(normalized_email):
        raise ValidationError("Invalid email format")
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if len(password.encode("utf-8")) > security.PASSWORD_MAX_BYTES:
        raise ValidationError(f"Password must be at most {security.PASSWORD_MAX_BYTES} bytes")

    if db.query(User.id).filter(User.email == normalized_email).first() is not None:
        raise DuplicateError("Email already registered. Please login instead.")

    user = User(
        user_id=generate_user_id(db),
        first_name=first,
        last_name=last,
        email=normalized_email,
        password_hash=security.hash_password(password),
        is_admin=is_admin,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as err:
        db.rollback()
        raise DuplicateError("Email already registered") from err
    db.refresh(user)
    return user


def authenticate(db: Session, email: str | None, password: str | None) -> User:
    """Check credentials and stamp the login time.

    Raises:
        ValidationError: If either credential is missing.
        AuthenticationError: If the email is unknown or the password is wrong.
    """
    normalized_email = _normalize_email(email)
    if not normalized_email or not password:
        raise ValidationError("Email and password are required")

    user = db.query(User).filter(User.email == normalized_email).first()
    if user is None:
        raise AuthenticationError("Invalid email or password. Please register first.")
    if not security.verify_password(password, user.password_hash):
        raise AuthenticationError("Invalid email or password")

    now = utcnow()
    user.last_login = now
    user.last_active = now
    db.commit()
    db.refresh(user)
    return user


def get_user_by_email(db: Session, email: str | None) -> User:
    """Return the account registered under ``email``."""
    normalized_email = _normalize_email(email)
    if not normalized_email:
        raise ValidationError("email query param is required")
    user = db.query(User).filter(User.email == normalized_email).first()
    if user is None:
        raise NotFoundError("User not found")
    return user


def ensure_admin_account(db: Session, email: str, password: str) -> User:
    """Create the administrator account, or promote the existing one.

    An existing non-admin account is promoted only when ``password`` matches
    its own password; otherwise it is left alone and a warning is logged.
    """
    normalized_email = _normalize_email(email)
    user = db.query(User).filter(User.email == normalized_email).first()
    if user is None:
        user = register_user(
            db,
            first_name="Admin",
            last_name="",
            email=normalized_email,
            password=password,
            is_admin=True,
        )
        logger.info("Seeded administrator account %s", user.user_id)
        return user
    if not user.is_admin:
        if not security.verify_password(password, user.password_hash):
            logger.warning(
                "Refusing to promote %s: ADMIN_PASSWORD does not match the existing account",
                user.user_id,
            )
            return user
        user.is_admin = True
        db.commit()
        db.refresh(user)
        logger.info("Promoted %s to administrator", user.user_id)
    return user
