"""Read-only aggregates backing the admin dashboard."""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import UTC, datetime, time, timedelta

from sqlalchemy import distinct, func
from sqlalchemy.orm import Session

from echo_feedback.core.errors import ValidationError
from echo_feedback.db.time import utcnow
from echo_feedback.models import AuditLog, Feedback
from echo_feedback.models.audit_log import AUDIT_ACTIONS, SEVERITIES
from echo_feedback.models.feedback import FEEDBACK_STATUS_FLAGGED, FEEDBACK_STATUSES
from echo_feedback.services.feedback_service import apply_search_filters

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass
class Page:
    """One page of results plus the pre-pagination total."""

    items: list
    total: int
    limit: int
    skip: int


def clamp_pagination(limit: int | None, skip: int | None, default: int = DEFAULT_PAGE_SIZE) -> tuple[int, int]:
    """Clamp ``limit`` to 1..100 and ``skip`` to >= 0."""
    parsed_limit = default if not limit else min(max(int(limit), 1), MAX_PAGE_SIZE)
    parsed_skip = max(int(skip or 0), 0)
    return parsed_limit, parsed_skip


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


def dashboard_stats(db: Session, now: datetime | None = None) -> dict[str, int]:
    """Headline numbers for the dashboard overview.

    ``feedbackGrowth`` compares the last 7 days with the 7 days before, in
    whole percent.
    """
    now = now or utcnow()
    this_week_start = now - timedelta(days=7)
    prev_week_start = now - timedelta(days=14)

    def count(*criteria) -> int:
        return db.query(func.count(Feedback.id)).filter(*criteria).scalar() or 0

    total_feedback = count()
    flagged_count = count(Feedback.status == FEEDBACK_STATUS_FLAGGED)
    this_week_count = count(Feedback.created_at >= this_week_start)
    prev_week_count = count(
        Feedback.created_at >= prev_week_start,
        Feedback.created_at < this_week_start,
    )
    total_unique_users = db.query(func.count(distinct(Feedback.user_email))).scalar() or 0
    active_users_this_week = (
        db.query(func.count(distinct(Feedback.user_email)))
        .filter(Feedback.created_at >= this_week_start)
        .scalar()
        or 0
    )

    if prev_week_count == 0:
        growth = 100 if this_week_count > 0 else 0
    else:
        growth = round((this_week_count - prev_week_count) / prev_week_count * 100)

    return {
        "totalFeedback": total_feedback,
        "totalUniqueUsers": total_unique_users,
        "activeUsersThisWeek": active_users_this_week,
        "thisWeekCount": this_week_count,
        "flaggedCount": flagged_count,
        "feedbackGrowth": growth,
    }


def chart_data(db: Session, now: datetime | None = None, days: int = 7) -> list[dict[str, object]]:
    """Daily feedback counts for the last ``days`` days (UTC), oldest first."""
    now = now or utcnow()
    first_day = now.astimezone(UTC).date() - timedelta(days=days - 1)
    start = datetime.combine(first_day, time.min, tzinfo=UTC)
    end = datetime.combine(now.astimezone(UTC).date(), time.max, tzinfo=UTC)

    rows = (
        db.query(Feedback.created_at)
        .filter(Feedback.created_at >= start, Feedback.created_at <= end)
        .all()
    )
    buckets = Counter(_as_utc(created_at).date() for (created_at,) in rows)
    return [
        {
            "date": (first_day + timedelta(days=offset)).isoformat(),
            "count": buckets.get(first_day + timedelta(days=offset), 0),
        }
        for offset in range(days)
    ]


def filter_feedback(
    db: Session,
    *,
    status: str | None = "all",
    keyword: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    limit: int | None = DEFAULT_PAGE_SIZE,
    skip: int | None = 0,
) -> Page:
    """Admin feedback table: every status, filterable and paginated."""
    query = db.query(Feedback)
    # Unknown statuses are ignored rather than rejected, like "all".
    if status and status != "all" and status in FEEDBACK_STATUSES:
        query = query.filter(Feedback.status == status)
    query = apply_search_filters(query, keyword=keyword, start_date=start_date, end_date=end_date)

    parsed_limit, parsed_skip = clamp_pagination(limit, skip)
    total = query.order_by(None).count()
    items = (
        query.order_by(Feedback.created_at.desc(), Feedback.id.desc())
        .offset(parsed_skip)
        .limit(parsed_limit)
        .all()
    )
    return Page(items=items, total=total, limit=parsed_limit, skip=parsed_skip)


def list_audit_logs(
    db: Session,
    *,
    action: str | None = None,
    severity: str | None = None,
    limit: int | None = 50,
    skip: int | None = 0,
) -> Page:
    """Audit entries newest first, optionally filtered by action and severity."""
    query = db.query(AuditLog)
    if action and action != "all":
        if action not in AUDIT_ACTIONS:
            raise ValidationError(f"Invalid action '{action}'")
        query = query.filter(AuditLog.action == action)
    if severity and severity != "all":
        if severity not in SEVERITIES:
            raise ValidationError(f"Invalid severity '{severity}'")
        query = query.filter(AuditLog.severity == severity)

    parsed_limit, parsed_skip = clamp_pagination(limit, skip, default=50)
    total = query.count()
    items = (
        query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
        .offset(parsed_skip)
        .limit(parsed_limit)
        .all()
    )
    return Page(items=items, total=total, limit=parsed_limit, skip=parsed_skip)
