"""Tests for the moderation engine: report filing and report review."""

from __future__ import annotations

import pytest

from echo_feedback.core.errors import (
    DuplicateError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from echo_feedback.models import AuditLog, Report
from echo_feedback.services.moderation import (
    BAN_REASON,
    SUSPENSION_REASON,
    ModerationService,
    ReportParty,
    escalate_risk,
    next_report_id,
    review_severity,
    risk_level_for,
)


def _party(user) -> ReportParty:
    return ReportParty(user_id=user.user_id, user_name=user.full_name, user_email=user.email)


def _report(db, feedback, reporter, author, reason="spam", details=""):
    return ModerationService.record_report(
        db,
        feedback_id=feedback.id,
        reported_by=_party(reporter),
        feedback_author=_party(author),
        reason=reason,
        details=details,
    )


@pytest.mark.parametrize(
    ("count", "expected"),
    [(0, "low"), (4, "low"), (5, "medium"), (9, "medium"), (10, "high"), (42, "high")],
)
def test_risk_level_for_thresholds(count: int, expected: str) -> None:
    assert risk_level_for(count) == expected


def test_escalate_risk_never_lowers() -> None:
    assert escalate_risk("high", 1) == "high"
    assert escalate_risk("medium", 2) == "medium"
    assert escalate_risk("low", 6) == "medium"
    assert escalate_risk("medium", 10) == "high"
    assert escalate_risk("bogus", 0) == "low"


def test_review_severity_by_action() -> None:
    assert review_severity("user_banned") == "high"
    assert review_severity("user_suspended") == "medium"
    assert review_severity("content_removed") == "medium"
    assert review_severity("warning") == "low"
    assert review_severity("none") == "low"


def test_record_report_creates_pending_report(db_session, test_feedback, test_user, other_user) -> None:
    report = _report(db_session, test_feedback, other_user, test_user, details="looks like spam")

    assert report.report_id == "R-0001"
    assert report.status == "pending"
    assert report.action == "none"
    assert report.reported_by["userId"] == other_user.user_id
    assert report.feedback_author["userId"] == test_user.user_id

    db_session.refresh(test_feedback)
    assert test_feedback.reports_count == 1
    assert test_feedback.reported_by[0]["userId"] == other_user.user_id
    assert test_feedback.reported_by[0]["reportId"] == "R-0001"
    assert test_feedback.status == "normal"

    db_session.refresh(test_user)
    assert test_user.reports_received == 1
    assert test_user.risk_level == "low"


def test_duplicate_report_rejected(db_session, test_feedback, test_user, other_user) -> None:
    _report(db_session, test_feedback, other_user, test_user)

    with pytest.raises(DuplicateError):
        _report(db_session, test_feedback, other_user, test_user, reason="offensive")

    assert db_session.query(Report).count() == 1
    db_session.refresh(test_feedback)
    assert test_feedback.reports_count == 1


def test_two_reports_leave_status_unchanged(db_session, make_user, test_feedback, test_user) -> None:
    for name in ("Carol", "Dave"):
        _report(db_session, test_feedback, make_user(name), test_user)

    db_session.refresh(test_feedback)
    assert test_feedback.reports_count == 2
    assert test_feedback.status == "normal"
    assert test_feedback.is_visible is True


def test_third_report_flags_feedback(db_session, make_user, test_feedback, test_user) -> None:
    for name in ("Carol", "Dave", "Erin"):
        _report(db_session, test_feedback, make_user(name), test_user)

    db_session.refresh(test_feedback)
    assert test_feedback.reports_count == 3
    assert test_feedback.status == "flagged"
    assert test_feedback.is_visible is True
    assert len(test_feedback.reported_by) == 3


def test_flagging_does_not_resurface_hidden_feedback(
    db_session, make_user, test_feedback, test_user
) -> None:
    test_feedback.status = "hidden"
    test_feedback.is_visible = False
    db_session.commit()

    for name in ("Carol", "Dave", "Erin"):
        _report(db_session, test_feedback, make_user(name), test_user)

    db_session.refresh(test_feedback)
    assert test_feedback.status == "hidden"
    assert test_feedback.is_visible is False


def test_author_risk_escalates_with_reports(db_session, make_user, make_feedback, test_user) -> None:
    reporter = make_user("Carol")
    for _ in range(5):
        _report(db_session, make_feedback(test_user), reporter, test_user)

    db_session.refresh(test_user)
    assert test_user.reports_received == 5
    assert test_user.risk_level == "medium"


def test_report_with_unknown_author_still_recorded(db_session, test_feedback, other_user) -> None:
    report = ModerationService.record_report(
        db_session,
        feedback_id=test_feedback.id,
        reported_by=_party(other_user),
        feedback_author=ReportParty(user_id=""),
        reason="other",
    )
    assert report.feedback_author["userId"] == ""


def test_report_validation(db_session, test_feedback, test_user, other_user) -> None:
    with pytest.raises(ValidationError):
        ModerationService.record_report(
            db_session,
            feedback_id=test_feedback.id,
            reported_by=None,
            feedback_author=_party(test_user),
            reason="spam",
        )
    with pytest.raises(ValidationError):
        ModerationService.record_report(
            db_session,
            feedback_id=test_feedback.id,
            reported_by=_party(other_user),
            feedback_author=_party(test_user),
            reason="boring",
        )
    with pytest.raises(NotFoundError):
        ModerationService.record_report(
            db_session,
            feedback_id=999_999,
            reported_by=_party(other_user),
            feedback_author=_party(test_user),
            reason="spam",
        )
    with pytest.raises(ForbiddenError):
        _report(db_session, test_feedback, test_user, test_user)
    assert db_session.query(Report).count() == 0


def test_unregistered_reporters_cannot_flag_feedback(db_session, test_feedback, test_user) -> None:
    for index in range(3):
        with pytest.raises(ForbiddenError):
            ModerationService.record_report(
                db_session,
                feedback_id=test_feedback.id,
                reported_by=ReportParty(user_id=f"ghost-{index}"),
                feedback_author=_party(test_user),
                reason="spam",
            )

    db_session.refresh(test_feedback)
    db_session.refresh(test_user)
    assert db_session.query(Report).count() == 0
    assert (test_feedback.status, test_feedback.reports_count) == ("normal", 0)
    assert test_user.reports_received == 0


def test_report_naming_wrong_author_rejected(
    db_session, make_user, test_feedback, test_user, other_user
) -> None:
    with pytest.raises(ValidationError):
        _report(db_session, test_feedback, make_user("Carol"), other_user)

    db_session.refresh(other_user)
    db_session.refresh(test_feedback)
    assert other_user.reports_received == 0
    assert other_user.risk_level == "low"
    assert test_feedback.reports_count == 0
    assert db_session.query(Report).count() == 0


def test_next_report_id_skips_taken_ids(db_session, make_user, make_feedback, test_user) -> None:
    reporter = make_user("Carol")
    first = _report(db_session, make_feedback(test_user), reporter, test_user)
    second = _report(db_session, make_feedback(test_user), reporter, test_user)
    db_session.delete(first)
    db_session.commit()

    # One row left, so the count suggests R-0002, which is still taken.
    assert second.report_id == "R-0002"
    assert next_report_id(db_session) == "R-0003"


def test_review_banned_bans_author_and_audits_high(
    db_session, test_feedback, test_user, other_user
) -> None:
    report = _report(db_session, test_feedback, other_user, test_user)

    reviewed = ModerationService.review_report(db_session, report.report_id, "user_banned")

    assert reviewed.status == "reviewed"
    assert reviewed.action == "user_banned"
    assert reviewed.reviewed_by == "Admin"
    assert reviewed.reviewed_at is not None
    db_session.refresh(test_user)
    assert test_user.status == "banned"
    assert test_user.banned_at is not None
    assert test_user.suspension_reason == BAN_REASON

    entries = db_session.query(AuditLog).all()
    assert len(entries) == 1
    assert entries[0].action == "review_report"
    assert entries[0].target_type == "report"
    assert entries[0].target_id == report.report_id
    assert entries[0].details == "Action: user_banned"
    assert entries[0].severity == "high"


def test_review_suspended_suspends_author(db_session, test_feedback, test_user, other_user) -> None:
    report = _report(db_session, test_feedback, other_user, test_user)

    ModerationService.review_report(
        db_session, report.report_id, "user_suspended", status="action_taken", reviewer="mod@example.com"
    )

    db_session.refresh(test_user)
    assert test_user.status == "suspended"
    assert test_user.suspended_at is not None
    assert test_user.suspension_reason == SUSPENSION_REASON
    entry = db_session.query(AuditLog).one()
    assert entry.admin == "mod@example.com"
    assert entry.severity == "medium"


def test_review_content_removed_leaves_author_untouched(
    db_session, test_feedback, test_user, other_user
) -> None:
    report = _report(db_session, test_feedback, other_user, test_user)

    reviewed = ModerationService.review_report(db_session, report.report_id, "content_removed")

    assert reviewed.status == "reviewed"
    assert reviewed.action == "content_removed"
    db_session.refresh(test_feedback)
    assert test_feedback.status == "removed"
    assert test_feedback.is_visible is False
    db_session.refresh(test_user)
    assert test_user.status == "active"


@pytest.mark.parametrize("action", ["none", "warning"])
def test_review_without_side_effects(db_session, test_feedback, test_user, other_user, action) -> None:
    report = _report(db_session, test_feedback, other_user, test_user)

    ModerationService.review_report(db_session, report.report_id, action, status="dismissed")

    db_session.refresh(test_feedback)
    db_session.refresh(test_user)
    assert test_feedback.status == "normal"
    assert test_user.status == "active"
    assert db_session.query(AuditLog).one().severity == "low"


def test_review_rejects_second_review(db_session, test_feedback, test_user, other_user) -> None:
    report = _report(db_session, test_feedback, other_user, test_user)
    ModerationService.review_report(db_session, report.report_id, "warning")

    with pytest.raises(ValidationError):
        ModerationService.review_report(db_session, report.report_id, "user_banned")

    db_session.refresh(test_user)
    assert test_user.status == "active"
    assert db_session.query(AuditLog).count() == 1


def test_review_validation(db_session, test_feedback, test_user, other_user) -> None:
    report = _report(db_session, test_feedback, other_user, test_user)

    with pytest.raises(ValidationError):
        ModerationService.review_report(db_session, report.report_id, "explode")
    with pytest.raises(ValidationError):
        ModerationService.review_report(db_session, report.report_id, "none", status="pending")
    with pytest.raises(NotFoundError):
        ModerationService.review_report(db_session, "R-9999", "none")


def test_spam_report_scenario(db_session, test_feedback, test_user, other_user) -> None:
    """A single spam report reviewed with content removal hides the feedback."""
    report = _report(db_session, test_feedback, other_user, test_user, reason="spam")

    ModerationService.review_report(db_session, report.report_id, "content_removed")

    db_session.refresh(test_feedback)
    db_session.refresh(report)
    assert (test_feedback.status, test_feedback.is_visible) == ("removed", False)
    assert (report.status, report.action) == ("reviewed", "content_removed")
