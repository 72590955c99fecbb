# src/echo_feedback/services/moderation.py
"""Moderation engine: cross-entity effects of reports and report reviews."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from echo_feedback.core.errors import DuplicateError, ForbiddenError, NotFoundError, ValidationError
from echo_feedback.core.settings import settings
from echo_feedback.db.time import utcnow
from echo_feedback.models import Feedback, Report, User
from echo_feedback.models.audit_log import SEVERITY_HIGH, SEVERITY_LOW, SEVERITY_MEDIUM
from echo_feedback.models.feedback import (
    FEEDBACK_STATUS_FLAGGED,
    FEEDBACK_STATUS_REMOVED,
    INVISIBLE_STATUSES,
)
from echo_feedback.models.report import (
    ACTION_CONTENT_REMOVED,
    ACTION_USER_BANNED,
    ACTION_USER_SUSPENDED,
    REPORT_ACTIONS,
    REPORT_REASONS,
    REPORT_STATUS_PENDING,
    REPORT_STATUS_REVIEWED,
    REVIEW_STATUSES,
)
from echo_feedback.models.user import (
    RISK_HIGH,
    RISK_LEVELS,
    RISK_LOW,
    RISK_MEDIUM,
    USER_STATUS_BANNED,
    USER_STATUS_SUSPENDED,
)
from echo_feedback.services.audit import DEFAULT_ADMIN, record_audit_event

logger = logging.getLogger(__name__)

SUSPENSION_REASON = "Multiple reports received"
BAN_REASON = "Severe violations"


@dataclass(frozen=True)
class ReportParty:
    """Identity snapshot of a reporter or a feedback author."""

    user_id: str
    user_name: str = ""
    user_email: str = ""


def risk_level_for(reports_received: int) -> str:
    """Map a report count to the risk level it implies on its own."""
    if reports_received >= settings.risk_high_threshold:
        return RISK_HIGH
    if reports_received >= settings.risk_medium_threshold:
        return RISK_MEDIUM
    return RISK_LOW


def escalate_risk(current: str, reports_received: int) -> str:
    """Return the higher of ``current`` and the level implied by the count.

    Automatic recomputation never lowers a level; only an admin can.
    """
    derived = risk_level_for(reports_received)
    if current not in RISK_LEVELS:
        return derived
    return max(current, derived, key=RISK_LEVELS.index)


def review_severity(action: str) -> str:
    """Audit severity for a report review action."""
    if action == ACTION_USER_BANNED:
        return SEVERITY_HIGH
    if action in (ACTION_USER_SUSPENDED, ACTION_CONTENT_REMOVED):
        return SEVERITY_MEDIUM
    return SEVERITY_LOW


def next_report_id(db: Session) -> str:
    """Return the next free ``R-####`` identifier.

    Numbering follows the current row count; gaps left by deleted reports are
    skipped rather than reused.
    """
    sequence = (db.query(func.count(Report.id)).scalar() or 0) + 1
    while True:
        candidate = f"R-{sequence:04d}"
        if db.query(Report.id).filter(Report.report_id == candidate).first() is None:
            return candidate
        sequence += 1


class ModerationService:
    """Service deciding and applying the effects of moderation events."""

    @staticmethod
    def record_report(
        db: Session,
        *,
        feedback_id: int | None,
        reported_by: ReportParty | None,
        feedback_author: ReportParty | None,
        reason: str | None,
        details: str | None = "",
    ) -> Report:
        """File a report and apply its side effects.

        Args:
            db: Database session
            feedback_id: Feedback being reported
            reported_by: The reporting user
            feedback_author: The feedback's author as seen by the reporter;
                ``user_id`` may be empty
            reason: One of the report reasons
            details: Free text, truncated to the configured maximum

        Returns:
            The persisted pending report.

        Raises:
            ValidationError: If a required field is missing, the reason is unknown,
                or the named author did not write the feedback
            NotFoundError: If the feedback does not exist
            ForbiddenError: If the reporter is not a registered user or is the
                feedback's author
            DuplicateError: If this reporter already reported this feedback
        """
        if not feedback_id or reported_by is None or not reported_by.user_id:
            raise ValidationError("Missing required fields")
        if feedback_author is None or not reason:
            raise ValidationError("Missing required fields")
        if reason not in REPORT_REASONS:
            raise ValidationError(f"Invalid reason '{reason}'")

        feedback = db.get(Feedback, feedback_id)
        if feedback is None:
            raise NotFoundError("Feedback not found")
        reporter = db.query(User.id).filter(User.user_id == reported_by.user_id).first()
        if reporter is None:
            raise ForbiddenError("Only registered users can report feedback")
        if feedback.user_id == reported_by.user_id:
            raise ForbiddenError("You cannot report your own feedback")
        if feedback_author.user_id and feedback_author.user_id != feedback.user_id:
            raise ValidationError("Feedback author does not match the reported feedback")

        existing = (
            db.query(Report.id)
            .filter(
                Report.feedback_id == feedback_id,
                Report.reported_by_user_id == reported_by.user_id,
            )
            .first()
        )
        if existing is not None:
            raise DuplicateError("You have already reported this feedback")

        report = Report(
            report_id=next_report_id(db),
            feedback_id=feedback_id,
            reported_by_user_id=reported_by.user_id,
            reported_by_user_name=reported_by.user_name,
            reported_by_user_email=reported_by.user_email,
            feedback_author_user_id=feedback_author.user_id or "",
            feedback_author_user_name=feedback_author.user_name or "",
            feedback_author_user_email=feedback_author.user_email or "",
            reason=reason,
            details=str(details or "")[: settings.report_details_max_length],
        )
        db.add(report)
        try:
            db.flush()
        except IntegrityError as err:
            db.rollback()
            raise DuplicateError("You have already reported this feedback") from err

        now = utcnow()
        feedback.reports_count = (feedback.reports_count or 0) + 1
        # Reassign so the JSON column is marked dirty.
        entry: dict[str, Any] = {
            "userId": reported_by.user_id,
            "reportId": report.report_id,
            "createdAt": now.isoformat(),
        }
        feedback.reported_by = [*(feedback.reported_by or []), entry]
        # Hidden and removed feedback stays invisible.
        if (
            feedback.reports_count >= settings.feedback_flag_threshold
            and feedback.status not in INVISIBLE_STATUSES
        ):
            feedback.status = FEEDBACK_STATUS_FLAGGED
            feedback.is_visible = True

        if feedback_author.user_id:
            author = db.query(User).filter(User.user_id == feedback_author.user_id).first()
            if author is not None:
                author.reports_received = (author.reports_received or 0) + 1
                author.risk_level = escalate_risk(author.risk_level, author.reports_received)

        db.commit()
        db.refresh(report)
        logger.info(
            "Report %s filed on feedback %s (reason=%s, reports=%d)",
            report.report_id,
            feedback_id,
            reason,
            feedback.reports_count,
        )
        return report

    @staticmethod
    def review_report(
        db: Session,
        report_id: str,
        action: str,
        *,
        status: str | None = None,
        reviewer: str = DEFAULT_ADMIN,
    ) -> Report:
        """Close a pending report and apply the chosen action.

        The report, feedback and user updates are committed together; the
        audit entry follows in a separate best-effort write.

        Raises:
            ValidationError: On an unknown action/status or a non-pending report
            NotFoundError: If the report does not exist
        """
        action = action or "none"
        status = status or REPORT_STATUS_REVIEWED
        if action not in REPORT_ACTIONS:
            raise ValidationError(f"Invalid action '{action}'")
        if status not in REVIEW_STATUSES:
            raise ValidationError(f"Invalid review status '{status}'")

        report = db.query(Report).filter(Report.report_id == report_id).first()
        if report is None:
            raise NotFoundError("Report not found")
        if report.status != REPORT_STATUS_PENDING:
            raise ValidationError("Report has already been reviewed")

        now = utcnow()
        report.status = status
        report.action = action
        report.reviewed_by = reviewer
        report.reviewed_at = now

        if action == ACTION_CONTENT_REMOVED:
            feedback = db.get(Feedback, report.feedback_id)
            if feedback is not None:
                feedback.status = FEEDBACK_STATUS_REMOVED
                feedback.is_visible = False
            else:
                logger.warning("Report %s references missing feedback %s",
                               report_id, report.feedback_id)
        elif action in (ACTION_USER_SUSPENDED, ACTION_USER_BANNED):
            author = None
            if report.feedback_author_user_id:
                author = (
                    db.query(User)
                    .filter(User.user_id == report.feedback_author_user_id)
                    .first()
                )
            if author is None:
                logger.warning("Report %s has no resolvable feedback author", report_id)
            elif action == ACTION_USER_SUSPENDED:
                author.status = USER_STATUS_SUSPENDED
                author.suspended_at = now
                author.suspension_reason = SUSPENSION_REASON
            else:
                author.status = USER_STATUS_BANNED
                author.banned_at = now
                author.suspension_reason = BAN_REASON

        db.commit()
        db.refresh(report)
        logger.info("Report %s reviewed by %s with action %s", report_id, reviewer, action)

        record_audit_event(
            db,
            admin=reviewer,
            action="review_report",
            target_type="report",
            target_id=report_id,
            details=f"Action: {action}",
            severity=review_severity(action),
        )
        return report
