"""Report-related Pydantic schemas."""
from __future__ import annotations

from .common import CamelModel, UtcDatetime


class ReportPartyIn(CamelModel):
    """Identity snapshot of a reporter or feedback author."""

    user_id: str | None = None
    user_name: str | None = ""
    user_email: str | None = ""


class ReportCreate(CamelModel):
    feedback_id: int | None = None
    reported_by: ReportPartyIn | None = None
    feedback_author: ReportPartyIn | None = None
    reason: str | None = None
    details: str | None = ""


class ReportReview(CamelModel):
    """Admin decision on a pending report."""

    status: str | None = None
    action: str | None = None


class ReportPartyOut(CamelModel):
    user_id: str
    user_name: str = ""
    user_email: str = ""


class ReportResponse(CamelModel):
    """Schema for report information returned by the API."""

    report_id: str
    feedback_id: int
    reported_by: ReportPartyOut
    feedback_author: ReportPartyOut
    reason: str
    details: str
    status: str
    action: str
    reviewed_by: str | None = None
    reviewed_at: UtcDatetime | None = None
    created_at: UtcDatetime
