"""Service-level helpers for creating, searching and moderating feedback."""
from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from datetime import UTC, date, datetime, time

from sqlalchemy import delete, func, insert, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from echo_feedback.core.errors import ForbiddenError, NotFoundError, ValidationError
from echo_feedback.core.settings import settings
from echo_feedback.models import Feedback, FeedbackLike, User
from echo_feedback.models.audit_log import SEVERITY_LOW, SEVERITY_MEDIUM
from echo_feedback.models.feedback import (
    FEEDBACK_STATUS_NORMAL,
    FEEDBACK_STATUSES,
    INVISIBLE_STATUSES,
    is_visible_status,
)
from echo_feedback.models.user import USER_STATUS_ACTIVE
from echo_feedback.services.audit import DEFAULT_ADMIN, record_audit_event

__all__ = [
    "create_feedback",
    "get_feedback",
    "list_feedback",
    "toggle_like",
    "search_feedback",
    "apply_search_filters",
    "parse_date_bound",
    "delete_feedback",
    "set_feedback_status",
    "bulk_delete_feedback",
]

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
NAME_MAX_LENGTH = 100


def create_feedback(
    db: Session,
    *,
    user_id: str,
    user_name: str,
    user_email: str,
    message: str,
) -> Feedback:
    """Persist new feedback for an active, registered author.

    Raises:
        ForbiddenError: If the author is unknown, suspended or banned.
        ValidationError: If the name, email or message is invalid.
    """
    author = db.query(User).filter(User.user_id == user_id).first() if user_id else None
    if author is None:
        raise ForbiddenError("Only registered users can submit feedback")
    if author.status != USER_STATUS_ACTIVE:
        raise ForbiddenError(f"Your account is {author.status} and cannot submit feedback")

    name = (user_name or "").strip()
    email = (user_email or "").strip().lower()
    text = (message or "").strip()

    errors: list[dict[str, str]] = []
    if not name:
        errors.append({"field": "userName", "message": "Name is required"})
    elif len(name) > NAME_MAX_LENGTH:
        errors.append(
            {"field": "userName", "message": f"Name must be at most {NAME_MAX_LENGTH} characters"}
        )
    if not EMAIL_PATTERN.match(email):
        errors.append({"field": "userEmail", "message": "Please provide a valid email address"})
    if not text:
        errors.append({"field": "message", "message": "Message is required"})
    elif len(text) > settings.feedback_max_length:
        errors.append(
            {
                "field": "message",
                "message": f"Message must be at most {settings.feedback_max_length} characters",
            }
        )
    if errors:
        raise ValidationError("Validation error", details=errors)

    feedback = Feedback(
        user_id=author.user_id,
        user_name=name,
        user_email=email,
        message=text,
        likes=0,
        status=FEEDBACK_STATUS_NORMAL,
        is_visible=True,
        reported_by=[],
    )
    db.add(feedback)
    db.commit()
    db.refresh(feedback)
    return feedback


def get_feedback(db: Session, feedback_id: int) -> Feedback:
    """Return a feedback entry or raise NotFoundError."""
    feedback = db.get(Feedback, feedback_id)
    if feedback is None:
        raise NotFoundError("Feedback not found")
    return feedback


def list_feedback(
    db: Session,
    *,
    visible_only: bool = True,
    skip: int = 0,
    limit: int | None = None,
) -> list[Feedback]:
    """Return feedback newest first, hiding moderated entries by default."""
    query = db.query(Feedback)
    if visible_only:
        query = query.filter(Feedback.is_visible.is_(True))
    query = query.order_by(Feedback.created_at.desc(), Feedback.id.desc()).offset(max(skip, 0))
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def toggle_like(db: Session, feedback_id: int, identifier: str) -> Feedback:
    """Flip ``identifier``'s membership in the feedback's like set.

    Membership is a single row keyed by ``(feedback_id, identifier)``, so the
    toggle is a conditional delete falling back to an insert; ``likes`` is then
    rewritten from the row count in SQL.
    """
    identifier = (identifier or "").strip()
    if not identifier:
        raise ValidationError("userIdentifier is required")
    get_feedback(db, feedback_id)

    removed = db.execute(
        delete(FeedbackLike).where(
            FeedbackLike.feedback_id == feedback_id,
            FeedbackLike.identifier == identifier,
        )
    ).rowcount
    if not removed:
        try:
            db.execute(insert(FeedbackLike).values(feedback_id=feedback_id, identifier=identifier))
        except IntegrityError:
            # A concurrent toggle already added it; the like is on either way.
            db.rollback()
            logger.debug("Like for %s by %s already present", feedback_id, identifier)

    like_count = (
        select(func.count())
        .select_from(FeedbackLike)
        .where(FeedbackLike.feedback_id == feedback_id)
        .scalar_subquery()
    )
    db.execute(update(Feedback).where(Feedback.id == feedback_id).values(likes=like_count))
    db.commit()

    feedback = get_feedback(db, feedback_id)
    db.refresh(feedback)
    return feedback


def parse_date_bound(value: str | None, *, end: bool = False) -> datetime | None:
    """Parse a ``startDate``/``endDate`` query value.

    A bare date expands to the start of that day, or to its last microsecond
    when ``end`` is set. Naive datetimes are taken as UTC.

    Raises:
        ValidationError: If the value is not an ISO date or datetime.
    """
    if value is None or not str(value).strip():
        return None
    raw = str(value).strip()
    try:
        if len(raw) == 10:
            day = date.fromisoformat(raw)
            return datetime.combine(day, time.max if end else time.min, tzinfo=UTC)
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError as err:
        raise ValidationError(f"Invalid date '{raw}'") from err
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def apply_search_filters(
    query: Query,
    *,
    keyword: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> Query:
    """Narrow a Feedback query by keyword and inclusive creation-date range."""
    term = (keyword or "").strip()
    if term:
        query = query.filter(
            or_(
                Feedback.user_name.icontains(term, autoescape=True),
                Feedback.user_email.icontains(term, autoescape=True),
                Feedback.message.icontains(term, autoescape=True),
            )
        )
    start = parse_date_bound(start_date)
    end = parse_date_bound(end_date, end=True)
    if start is not None:
        query = query.filter(Feedback.created_at >= start)
    if end is not None:
        query = query.filter(Feedback.created_at <= end)
    return query


def search_feedback(
    db: Session,
    *,
    keyword: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    visible_only: bool = False,
) -> list[Feedback]:
    """Return feedback matching the keyword and date range, newest first.

    ``visible_only`` drops hidden and removed feedback.
    """
    query = apply_search_filters(
        db.query(Feedback),
        keyword=keyword,
        start_date=start_date,
        end_date=end_date,
    )
    if visible_only:
        query = query.filter(Feedback.is_visible.is_(True))
    return query.order_by(Feedback.created_at.desc(), Feedback.id.desc()).all()


def delete_feedback(db: Session, feedback_id: int, requester_user_id: str) -> None:
    """Hard-delete feedback on behalf of its author."""
    feedback = get_feedback(db, feedback_id)
    if not requester_user_id or feedback.user_id != requester_user_id:
        raise ForbiddenError("You can only delete your own feedback")
    db.delete(feedback)
    db.commit()


def set_feedback_status(
    db: Session,
    feedback_id: int,
    status: str,
    *,
    admin_notes: str | None = None,
    admin: str = DEFAULT_ADMIN,
) -> Feedback:
    """Set a moderation status, keeping ``is_visible`` in step with it."""
    if status not in FEEDBACK_STATUSES:
        raise ValidationError("Invalid status")
    feedback = get_feedback(db, feedback_id)
    previous = feedback.status
    feedback.status = status
    feedback.is_visible = is_visible_status(status)
    if admin_notes is not None:
        feedback.admin_notes = admin_notes
    db.commit()
    db.refresh(feedback)

    record_audit_event(
        db,
        admin=admin,
        action="status_change",
        target_type="feedback",
        target_id=str(feedback_id),
        details=f"Status changed from {previous} to {status}",
        severity=SEVERITY_MEDIUM if status in INVISIBLE_STATUSES else SEVERITY_LOW,
    )
    return feedback


def bulk_delete_feedback(
    db: Session,
    ids: Sequence[int],
    *,
    admin: str = DEFAULT_ADMIN,
) -> int:
    """Delete every listed feedback that exists and return how many went."""
    if not ids:
        raise ValidationError("ids array is required")
    unique_ids = sorted(set(ids))
    db.execute(delete(FeedbackLike).where(FeedbackLike.feedback_id.in_(unique_ids)))
    deleted = db.execute(delete(Feedback).where(Feedback.id.in_(unique_ids))).rowcount or 0
    db.commit()

    record_audit_event(
        db,
        admin=admin,
        action="delete",
        target_type="feedback",
        target_id=",".join(str(i) for i in unique_ids)[:64],
        details=f"Bulk deleted {deleted} feedback entries",
        severity=SEVERITY_MEDIUM,
    )
    return deleted
