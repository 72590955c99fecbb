"""Report filing, listing and review."""
from __future__ import annotations

from sqlalchemy.orm import Session

from echo_feedback.core.errors import ValidationError
from echo_feedback.models import Report
from echo_feedback.models.report import REPORT_STATUSES
from echo_feedback.services.audit import DEFAULT_ADMIN
from echo_feedback.services.moderation import ModerationService, ReportParty

__all__ = ["create_report", "list_reports", "review_report", "ReportParty"]


def create_report(
    db: Session,
    *,
    feedback_id: int | None,
    reported_by: ReportParty | None,
    feedback_author: ReportParty | None,
    reason: str | None,
    details: str | None = "",
) -> Report:
    """File a report; see :meth:`ModerationService.record_report`."""
    return ModerationService.record_report(
        db,
        feedback_id=feedback_id,
        reported_by=reported_by,
        feedback_author=feedback_author,
        reason=reason,
        details=details,
    )


def list_reports(db: Session, status: str | None = None) -> list[Report]:
    """Return reports newest first, optionally limited to one status.

    ``None``, an empty string and ``"all"`` disable the filter.
    """
    query = db.query(Report)
    if status and status != "all":
        if status not in REPORT_STATUSES:
            raise ValidationError(f"Invalid status '{status}'")
        query = query.filter(Report.status == status)
    return query.order_by(Report.created_at.desc(), Report.id.desc()).all()


def review_report(
    db: Session,
    report_id: str,
    action: str,
    *,
    status: str | None = None,
    reviewer: str = DEFAULT_ADMIN,
) -> Report:
    """Review a pending report; see :meth:`ModerationService.review_report`."""
    return ModerationService.review_report(
        db,
        report_id,
        action,
        status=status,
        reviewer=reviewer,
    )
