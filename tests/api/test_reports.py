"""Tests for report filing and admin review endpoints."""

from __future__ import annotations

from fastapi import status

from echo_feedback.models import AuditLog


def _report_body(feedback, reporter, author, reason="spam"):
    return {
        "feedbackId": feedback.id,
        "reportedBy": {
            "userId": reporter.user_id,
            "userName": reporter.full_name,
            "userEmail": reporter.email,
        },
        "feedbackAuthor": {
            "userId": author.user_id,
            "userName": author.full_name,
            "userEmail": author.email,
        },
        "reason": reason,
        "details": "Looks like spam",
    }


def test_create_report(client, test_feedback, test_user, other_user) -> None:
    r = client.post("/api/reports", json=_report_body(test_feedback, other_user, test_user))

    assert r.status_code == status.HTTP_201_CREATED
    data = r.json()["data"]
    assert data["reportId"] == "R-0001"
    assert data["status"] == "pending"
    assert data["reportedBy"]["userId"] == other_user.user_id
    assert data["feedbackAuthor"]["userId"] == test_user.user_id


def test_duplicate_report(client, test_feedback, test_user, other_user) -> None:
    body = _report_body(test_feedback, other_user, test_user)
    client.post("/api/reports", json=body)

    r = client.post("/api/reports", json=body)

    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert r.json()["error"] == "You have already reported this feedback"


def test_report_missing_fields(client, test_feedback) -> None:
    r = client.post("/api/reports", json={"feedbackId": test_feedback.id, "reason": "spam"})
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert r.json()["error"] == "Missing required fields"


def test_report_from_unknown_user_forbidden(client, test_feedback, test_user) -> None:
    body = _report_body(test_feedback, test_user, test_user)
    body["reportedBy"] = {"userId": "ghost-0"}

    r = client.post("/api/reports", json=body)

    assert r.status_code == status.HTTP_403_FORBIDDEN
    assert r.json()["error"] == "Only registered users can report feedback"


def test_report_with_mismatched_author_rejected(client, test_feedback, other_user, make_user) -> None:
    r = client.post("/api/reports", json=_report_body(test_feedback, make_user("Carol"), other_user))

    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert r.json()["error"] == "Feedback author does not match the reported feedback"


def test_list_reports_requires_admin(client, user_headers) -> None:
    assert client.get("/api/reports").status_code == status.HTTP_401_UNAUTHORIZED
    assert client.get("/api/reports", headers=user_headers).status_code == status.HTTP_403_FORBIDDEN


def test_list_reports_with_status_filter(
    client, admin_headers, test_feedback, test_user, other_user
) -> None:
    client.post("/api/reports", json=_report_body(test_feedback, other_user, test_user))

    pending = client.get("/api/reports", params={"status": "pending"}, headers=admin_headers)
    reviewed = client.get("/api/reports", params={"status": "reviewed"}, headers=admin_headers)
    invalid = client.get("/api/reports", params={"status": "maybe"}, headers=admin_headers)

    assert len(pending.json()["data"]) == 1
    assert reviewed.json()["data"] == []
    assert invalid.status_code == status.HTTP_400_BAD_REQUEST


def test_review_spam_with_content_removed(
    client, db_session, admin_user, admin_headers, test_feedback, test_user, other_user
) -> None:
    created = client.post("/api/reports", json=_report_body(test_feedback, other_user, test_user))
    report_id = created.json()["data"]["reportId"]

    r = client.put(
        f"/api/reports/{report_id}/review",
        json={"action": "content_removed"},
        headers=admin_headers,
    )

    assert r.status_code == status.HTTP_200_OK
    data = r.json()["data"]
    assert (data["status"], data["action"]) == ("reviewed", "content_removed")
    assert data["reviewedBy"] == admin_user.email

    feedback = client.get(f"/api/feedbacks/{test_feedback.id}").json()["data"]
    assert (feedback["status"], feedback["isVisible"]) == ("removed", False)
    entry = db_session.query(AuditLog).one()
    assert entry.admin == admin_user.email
    assert entry.action == "review_report"


def test_review_twice_rejected(client, admin_headers, test_feedback, test_user, other_user) -> None:
    created = client.post("/api/reports", json=_report_body(test_feedback, other_user, test_user))
    url = f"/api/reports/{created.json()['data']['reportId']}/review"

    client.put(url, json={"action": "warning"}, headers=admin_headers)
    again = client.put(url, json={"action": "user_banned"}, headers=admin_headers)

    assert again.status_code == status.HTTP_400_BAD_REQUEST
    assert again.json()["error"] == "Report has already been reviewed"


def test_review_unknown_report(client, admin_headers) -> None:
    r = client.put("/api/reports/R-9999/review", json={"action": "none"}, headers=admin_headers)
    assert r.status_code == status.HTTP_404_NOT_FOUND
