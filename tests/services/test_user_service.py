"""Tests for administrative user management."""

from __future__ import annotations

import pytest

from echo_feedback.core.errors import NotFoundError, ValidationError
from echo_feedback.models import AuditLog, Feedback, FeedbackLike, Report, User
from echo_feedback.services import feedback_service, user_service
from echo_feedback.services.moderation import ModerationService, ReportParty


def _report(db, feedback, reporter, author):
    return ModerationService.record_report(
        db,
        feedback_id=feedback.id,
        reported_by=ReportParty(user_id=reporter.user_id),
        feedback_author=ReportParty(user_id=author.user_id),
        reason="spam",
    )


def test_list_users_with_counts_and_stats(
    db_session, make_user, make_feedback, test_user, other_user, suspended_user
) -> None:
    make_feedback(test_user, "first")
    target = make_feedback(test_user, "second")
    _report(db_session, target, other_user, test_user)
    make_user("Hugo", status="banned", risk_level="high")

    listing = user_service.list_users(db_session)

    by_id = {user.user_id: (fb, reports) for user, fb, reports in listing.users}
    assert by_id[test_user.user_id] == (2, 1)
    assert by_id[other_user.user_id] == (0, 0)
    assert listing.stats == {
        "total": 4,
        "active": 2,
        "suspended": 1,
        "banned": 1,
        "highRisk": 1,
    }


def test_list_users_filters(db_session, make_user, test_user, suspended_user) -> None:
    make_user("Gina", risk_level="medium")

    suspended = user_service.list_users(db_session, status="suspended")
    medium = user_service.list_users(db_session, risk_level="medium")
    everyone = user_service.list_users(db_session, status="all", risk_level="all")

    assert [user.user_id for user, _, _ in suspended.users] == [suspended_user.user_id]
    assert [user.first_name for user, _, _ in medium.users] == ["Gina"]
    assert len(everyone.users) == 3


def test_list_users_search(db_session, test_user, other_user) -> None:
    by_name = user_service.list_users(db_session, search="alice")
    by_id = user_service.list_users(db_session, search=other_user.user_id)

    assert [user.user_id for user, _, _ in by_name.users] == [test_user.user_id]
    assert [user.user_id for user, _, _ in by_id.users] == [other_user.user_id]


def test_get_user_detail(db_session, make_feedback, test_user, other_user) -> None:
    feedback = make_feedback(test_user)
    _report(db_session, feedback, other_user, test_user)

    detail = user_service.get_user_detail(db_session, test_user.user_id)

    assert detail.user.user_id == test_user.user_id
    assert [item.id for item in detail.feedbacks] == [feedback.id]
    assert len(detail.reports) == 1

    with pytest.raises(NotFoundError):
        user_service.get_user_detail(db_session, "U-0000")


def test_suspend_then_reactivate(db_session, test_user) -> None:
    suspended = user_service.set_user_status(
        db_session, test_user.user_id, "suspended", "Spamming", admin="root@example.com"
    )
    assert suspended.status == "suspended"
    assert suspended.suspended_at is not None
    assert suspended.suspension_reason == "Spamming"

    active = user_service.set_user_status(db_session, test_user.user_id, "active")
    assert active.status == "active"
    assert active.suspended_at is None
    assert active.banned_at is None
    assert active.suspension_reason == ""

    entries = db_session.query(AuditLog).order_by(AuditLog.id).all()
    assert [(e.action, e.severity) for e in entries] == [("suspend", "medium"), ("approve", "low")]
    assert entries[0].admin == "root@example.com"
    assert entries[0].details == "Reason: Spamming"


def test_ban_sets_banned_at_and_audits_high(db_session, test_user) -> None:
    banned = user_service.set_user_status(db_session, test_user.user_id, "banned")

    assert banned.banned_at is not None
    entry = db_session.query(AuditLog).one()
    assert (entry.action, entry.severity, entry.target_type) == ("ban", "high", "user")


def test_set_user_status_validation(db_session, test_user) -> None:
    with pytest.raises(ValidationError):
        user_service.set_user_status(db_session, test_user.user_id, "frozen")
    with pytest.raises(NotFoundError):
        user_service.set_user_status(db_session, "U-0000", "banned")


def test_set_risk_level_override(db_session, test_user) -> None:
    updated = user_service.set_risk_level(db_session, test_user.user_id, "high")
    assert updated.risk_level == "high"
    assert updated.status == "active"

    lowered = user_service.set_risk_level(db_session, test_user.user_id, "low")
    assert lowered.risk_level == "low"

    with pytest.raises(ValidationError):
        user_service.set_risk_level(db_session, test_user.user_id, "extreme")


def test_delete_user_removes_feedback_and_reports(
    db_session, make_user, make_feedback, test_user, other_user
) -> None:
    own = make_feedback(test_user, "mine")
    feedback_service.toggle_like(db_session, own.id, "1.2.3.4")
    _report(db_session, own, other_user, test_user)
    others = make_feedback(other_user, "theirs")
    _report(db_session, others, test_user, other_user)
    bystander = make_user("Ivy")
    _report(db_session, others, bystander, other_user)

    counts = user_service.delete_user(db_session, test_user.user_id, admin="root@example.com")

    assert counts == {"feedbackDeleted": 1, "reportsDeleted": 2}
    assert db_session.query(User).filter(User.user_id == test_user.user_id).first() is None
    assert db_session.query(Feedback).filter(Feedback.user_id == test_user.user_id).count() == 0
    assert db_session.query(FeedbackLike).count() == 0
    remaining = db_session.query(Report).all()
    assert [r.reported_by_user_id for r in remaining] == [bystander.user_id]

    entry = db_session.query(AuditLog).one()
    assert (entry.action, entry.severity, entry.target_id) == ("delete", "high", test_user.user_id)

    with pytest.raises(NotFoundError):
        user_service.get_user_detail(db_session, test_user.user_id)
