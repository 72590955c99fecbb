# src/echo_feedback/models/report.py
"""SQLAlchemy model for user-filed reports against feedback."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from echo_feedback.db.session import Base
from echo_feedback.db.time import utcnow

REPORT_REASONS = ("spam", "offensive", "inappropriate", "harassment", "other")

REPORT_STATUS_PENDING = "pending"
REPORT_STATUS_REVIEWED = "reviewed"
REPORT_STATUS_DISMISSED = "dismissed"
REPORT_STATUS_ACTION_TAKEN = "action_taken"
REPORT_STATUSES = (
    REPORT_STATUS_PENDING,
    REPORT_STATUS_REVIEWED,
    REPORT_STATUS_DISMISSED,
    REPORT_STATUS_ACTION_TAKEN,
)
REVIEW_STATUSES = REPORT_STATUSES[1:]

ACTION_NONE = "none"
ACTION_WARNING = "warning"
ACTION_CONTENT_REMOVED = "content_removed"
ACTION_USER_SUSPENDED = "user_suspended"
ACTION_USER_BANNED = "user_banned"
REPORT_ACTIONS = (
    ACTION_NONE,
    ACTION_WARNING,
    ACTION_CONTENT_REMOVED,
    ACTION_USER_SUSPENDED,
    ACTION_USER_BANNED,
)


class Report(Base):
    """A complaint filed by one user against another user's feedback.

    Reporter and author details are snapshotted at filing time so the report
    stays readable after either account changes.
    """

    __tablename__ = "reports"
    __table_args__ = (
        UniqueConstraint("feedback_id", "reported_by_user_id", name="uq_report_feedback_reporter"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    report_id: Mapped[str] = mapped_column(String(16), unique=True, index=True, nullable=False)
    feedback_id: Mapped[int] = mapped_column(Integer, index=True, nullable=False)

    reported_by_user_id: Mapped[str] = mapped_column(String(16), index=True, nullable=False)
    reported_by_user_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    reported_by_user_email: Mapped[str] = mapped_column(String(254), nullable=False, default="")

    # Empty string when the author could not be identified by the reporter.
    feedback_author_user_id: Mapped[str] = mapped_column(
        String(16), index=True, nullable=False, default=""
    )
    feedback_author_user_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    feedback_author_user_email: Mapped[str] = mapped_column(
        String(254), nullable=False, default=""
    )

    reason: Mapped[str] = mapped_column(String(32), nullable=False)
    details: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=REPORT_STATUS_PENDING, index=True
    )
    action: Mapped[str] = mapped_column(String(32), nullable=False, default=ACTION_NONE)
    reviewed_by: Mapped[str | None] = mapped_column(String(254), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )

    @property
    def reported_by(self) -> dict[str, str]:
        return {
            "userId": self.reported_by_user_id,
            "userName": self.reported_by_user_name,
            "userEmail": self.reported_by_user_email,
        }

    @property
    def feedback_author(self) -> dict[str, str]:
        return {
            "userId": self.feedback_author_user_id,
            "userName": self.feedback_author_user_name,
            "userEmail": self.feedback_author_user_email,
        }
