# src/echo_feedback/models/user.py
"""SQLAlchemy model for registered accounts."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from echo_feedback.db.session import Base
from echo_feedback.db.time import utcnow

USER_STATUS_ACTIVE = "active"
USER_STATUS_SUSPENDED = "suspended"
USER_STATUS_BANNED = "banned"
USER_STATUSES = (USER_STATUS_ACTIVE, USER_STATUS_SUSPENDED, USER_STATUS_BANNED)

RISK_LOW = "low"
RISK_MEDIUM = "medium"
RISK_HIGH = "high"
RISK_LEVELS = (RISK_LOW, RISK_MEDIUM, RISK_HIGH)


class User(Base):
    """An account that can author feedback and file reports."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Public identifier in "U-XXXX" form; the integer key never leaves the service.
    user_id: Mapped[str] = mapped_column(String(16), unique=True, index=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(254), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default=USER_STATUS_ACTIVE)
    risk_level: Mapped[str] = mapped_column(String(16), nullable=False, default=RISK_LOW)
    reports_received: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    suspended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    banned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    suspension_reason: Mapped[str] = mapped_column(Text, nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    last_login: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    last_active: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    @property
    def full_name(self) -> str:
        """Return first and last name joined, without trailing space."""
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_restricted(self) -> bool:
        """True when the account may not create content."""
        return self.status in (USER_STATUS_SUSPENDED, USER_STATUS_BANNED)
