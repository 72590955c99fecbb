"""CRUD-style helpers for administering users."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import delete, func, or_
from sqlalchemy.orm import Session

from echo_feedback.core.errors import NotFoundError, ValidationError
from echo_feedback.db.time import utcnow
from echo_feedback.models import Feedback, FeedbackLike, Report, User
from echo_feedback.models.audit_log import SEVERITY_HIGH, SEVERITY_LOW, SEVERITY_MEDIUM
from echo_feedback.models.user import (
    RISK_HIGH,
    RISK_LEVELS,
    USER_STATUS_ACTIVE,
    USER_STATUS_BANNED,
    USER_STATUS_SUSPENDED,
    USER_STATUSES,
)
from echo_feedback.services.audit import DEFAULT_ADMIN, record_audit_event

__all__ = [
    "UserListing",
    "UserDetail",
    "get_user",
    "list_users",
    "get_user_detail",
    "set_user_status",
    "set_risk_level",
    "delete_user",
]

logger = logging.getLogger(__name__)

_STATUS_AUDIT = {
    USER_STATUS_BANNED: ("ban", SEVERITY_HIGH),
    USER_STATUS_SUSPENDED: ("suspend", SEVERITY_MEDIUM),
    USER_STATUS_ACTIVE: ("approve", SEVERITY_LOW),
}


@dataclass
class UserListing:
    """Users enriched with live counts, plus population totals."""

    users: list[tuple[User, int, int]]
    stats: dict[str, int] = field(default_factory=dict)


@dataclass
class UserDetail:
    user: User
    feedbacks: list[Feedback]
    reports: list[Report]


def get_user(db: Session, user_id: str) -> User:
    """Return a user by public id or raise NotFoundError."""
    user = db.query(User).filter(User.user_id == user_id).first()
    if user is None:
        raise NotFoundError("User not found")
    return user


def _count(db: Session, *criteria: Any) -> int:
    return db.query(func.count(User.id)).filter(*criteria).scalar() or 0


def list_users(
    db: Session,
    *,
    status: str | None = None,
    risk_level: str | None = None,
    search: str | None = None,
) -> UserListing:
    """Return users newest first with feedback and report counts.

    Each entry is ``(user, feedback_count, reports_received)``; both counts are
    computed from the feedback and report tables rather than the stored
    counter.
    """
    query = db.query(User)
    if status and status != "all":
        query = query.filter(User.status == status)
    if risk_level and risk_level != "all":
        query = query.filter(User.risk_level == risk_level)
    term = (search or "").strip()
    if term:
        query = query.filter(
            or_(
                User.first_name.icontains(term, autoescape=True),
                User.last_name.icontains(term, autoescape=True),
                User.email.icontains(term, autoescape=True),
                User.user_id.icontains(term, autoescape=True),
            )
        )
    users = query.order_by(User.created_at.desc(), User.id.desc()).all()

    ids = [user.user_id for user in users]
    feedback_counts: dict[str, int] = {}
    report_counts: dict[str, int] = {}
    if ids:
        feedback_counts = dict(
            db.query(Feedback.user_id, func.count(Feedback.id))
            .filter(Feedback.user_id.in_(ids))
            .group_by(Feedback.user_id)
            .all()
        )
        report_counts = dict(
            db.query(Report.feedback_author_user_id, func.count(Report.id))
            .filter(Report.feedback_author_user_id.in_(ids))
            .group_by(Report.feedback_author_user_id)
            .all()
        )

    stats = {
        "total": _count(db),
        "active": _count(db, User.status == USER_STATUS_ACTIVE),
        "suspended": _count(db, User.status == USER_STATUS_SUSPENDED),
        "banned": _count(db, User.status == USER_STATUS_BANNED),
        "highRisk": _count(db, User.risk_level == RISK_HIGH),
    }
    return UserListing(
        users=[
            (user, feedback_counts.get(user.user_id, 0), report_counts.get(user.user_id, 0))
            for user in users
        ],
        stats=stats,
    )


def get_user_detail(db: Session, user_id: str) -> UserDetail:
    """Return a user with their feedback and the reports filed against them."""
    user = get_user(db, user_id)
    feedbacks = (
        db.query(Feedback)
        .filter(Feedback.user_id == user_id)
        .order_by(Feedback.created_at.desc(), Feedback.id.desc())
        .all()
    )
    reports = (
        db.query(Report)
        .filter(Report.feedback_author_user_id == user_id)
        .order_by(Report.created_at.desc(), Report.id.desc())
        .all()
    )
    return UserDetail(user=user, feedbacks=feedbacks, reports=reports)


def set_user_status(
    db: Session,
    user_id: str,
    status: str,
    reason: str | None = None,
    *,
    admin: str = DEFAULT_ADMIN,
) -> User:
    """Move a user between active, suspended and banned."""
    if status not in USER_STATUSES:
        raise ValidationError("Invalid status")
    user = get_user(db, user_id)

    now = utcnow()
    user.status = status
    if status == USER_STATUS_SUSPENDED:
        user.suspended_at = now
        user.suspension_reason = reason or ""
    elif status == USER_STATUS_BANNED:
        user.banned_at = now
        user.suspension_reason = reason or ""
    else:
        user.suspended_at = None
        user.banned_at = None
        user.suspension_reason = ""
    db.commit()
    db.refresh(user)

    audit_action, severity = _STATUS_AUDIT[status]
    record_audit_event(
        db,
        admin=admin,
        action=audit_action,
        target_type="user",
        target_id=user_id,
        details=f"Reason: {reason}" if reason else f"User set to {status}",
        severity=severity,
    )
    return user


def set_risk_level(db: Session, user_id: str, risk_level: str) -> User:
    """Override a user's risk level; the next report may raise it again."""
    if risk_level not in RISK_LEVELS:
        raise ValidationError("Invalid risk level")
    user = get_user(db, user_id)
    user.risk_level = risk_level
    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: str, *, admin: str = DEFAULT_ADMIN) -> dict[str, int]:
    """Delete a user together with their feedback and every report naming them.

    All deletes share one transaction; the user row goes last.

    Returns:
        Counts of removed feedback and reports.
    """
    user = get_user(db, user_id)

    feedback_ids = [
        row[0] for row in db.query(Feedback.id).filter(Feedback.user_id == user_id).all()
    ]
    if feedback_ids:
        db.execute(delete(FeedbackLike).where(FeedbackLike.feedback_id.in_(feedback_ids)))
    feedback_deleted = (
        db.execute(delete(Feedback).where(Feedback.user_id == user_id)).rowcount or 0
    )
    reports_deleted = (
        db.execute(
            delete(Report).where(
                or_(
                    Report.reported_by_user_id == user_id,
                    Report.feedback_author_user_id == user_id,
                )
            )
        ).rowcount
        or 0
    )
    db.delete(user)
    db.commit()
    logger.info(
        "Deleted user %s with %d feedback and %d reports",
        user_id,
        feedback_deleted,
        reports_deleted,
    )

    record_audit_event(
        db,
        admin=admin,
        action="delete",
        target_type="user",
        target_id=user_id,
        details="User and associated data deleted",
        severity=SEVERITY_HIGH,
    )
    return {"feedbackDeleted": feedback_deleted, "reportsDeleted": reports_deleted}
