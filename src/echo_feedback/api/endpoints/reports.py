"""Report filing (public) and review (admin) endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from echo_feedback.api.dependencies import AdminDep, SessionDep, get_current_admin
from echo_feedback.schemas import (
    Envelope,
    ReportCreate,
    ReportPartyIn,
    ReportResponse,
    ReportReview,
)
from echo_feedback.services import report_service
from echo_feedback.services.report_service import ReportParty

router = APIRouter(prefix="/reports", tags=["reports"])


def _party(payload: ReportPartyIn | None) -> ReportParty | None:
    if payload is None:
        return None
    return ReportParty(
        user_id=(payload.user_id or "").strip(),
        user_name=payload.user_name or "",
        user_email=payload.user_email or "",
    )


@router.post(
    "",
    response_model=Envelope[ReportResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_report(payload: ReportCreate, db: SessionDep) -> Envelope[ReportResponse]:
    """File a report against a feedback entry."""
    report = report_service.create_report(
        db,
        feedback_id=payload.feedback_id,
        reported_by=_party(payload.reported_by),
        feedback_author=_party(payload.feedback_author),
        reason=payload.reason,
        details=payload.details,
    )
    return Envelope(
        data=ReportResponse.model_validate(report),
        message="Report submitted successfully",
    )


@router.get(
    "",
    response_model=Envelope[list[ReportResponse]],
    dependencies=[Depends(get_current_admin)],
)
async def list_reports(
    db: SessionDep,
    report_status: str | None = Query(None, alias="status"),
) -> Envelope[list[ReportResponse]]:
    """List reports newest first, optionally by status."""
    reports = report_service.list_reports(db, report_status)
    return Envelope(data=[ReportResponse.model_validate(report) for report in reports])


@router.put("/{report_id}/review", response_model=Envelope[ReportResponse])
async def review_report(
    report_id: str,
    payload: ReportReview,
    db: SessionDep,
    admin: AdminDep,
) -> Envelope[ReportResponse]:
    """Record an admin decision on a pending report and apply its action."""
    report = report_service.review_report(
        db,
        report_id,
        payload.action,
        status=payload.status,
        reviewer=admin.email,
    )
    return Envelope(data=ReportResponse.model_validate(report))
