# src/echo_feedback/models/feedback.py
"""SQLAlchemy models for feedback entries and their likes."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from echo_feedback.db.session import Base
from echo_feedback.db.time import utcnow

FEEDBACK_STATUS_NORMAL = "normal"
FEEDBACK_STATUS_FLAGGED = "flagged"
FEEDBACK_STATUS_HIDDEN = "hidden"
FEEDBACK_STATUS_REMOVED = "removed"
FEEDBACK_STATUS_REVIEW = "review"
FEEDBACK_STATUSES = (
    FEEDBACK_STATUS_NORMAL,
    FEEDBACK_STATUS_FLAGGED,
    FEEDBACK_STATUS_HIDDEN,
    FEEDBACK_STATUS_REMOVED,
    FEEDBACK_STATUS_REVIEW,
)
INVISIBLE_STATUSES = frozenset({FEEDBACK_STATUS_HIDDEN, FEEDBACK_STATUS_REMOVED})


def is_visible_status(status: str) -> bool:
    """Return whether feedback in ``status`` is shown to end users."""
    return status not in INVISIBLE_STATUSES


class Feedback(Base):
    """A short piece of text submitted by a registered user."""

    __tablename__ = "feedback"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Loose reference to users.user_id; authors can be deleted independently.
    user_id: Mapped[str] = mapped_column(String(16), index=True, nullable=False)
    user_name: Mapped[str] = mapped_column(String(100), nullable=False)
    user_email: Mapped[str] = mapped_column(String(254), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    # Denormalised count of feedback_like rows, rewritten on every toggle.
    likes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=FEEDBACK_STATUS_NORMAL, index=True
    )
    is_visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    admin_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    reports_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # [{"userId", "reportId", "createdAt"}], appended by the moderation engine.
    reported_by: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    like_entries: Mapped[list[FeedbackLike]] = relationship(
        "FeedbackLike",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="FeedbackLike.created_at",
    )

    @property
    def liked_by(self) -> list[str]:
        """Identifiers currently liking this entry."""
        return [like.identifier for like in self.like_entries]


class FeedbackLike(Base):
    """Membership of one identifier in a feedback's like set."""

    __tablename__ = "feedback_like"

    # Composite key makes add/remove a single-row conditional write.
    feedback_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("feedback.id", ondelete="CASCADE"),
        primary_key=True,
    )
    identifier: Mapped[str] = mapped_column(String(255), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
