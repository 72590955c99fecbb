"""Admin dashboard endpoints: aggregates, feedback moderation and audit log."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from echo_feedback.api.dependencies import AdminDep, SessionDep, get_current_admin
from echo_feedback.schemas import (
    AuditLogPage,
    AuditLogResponse,
    BulkDeleteRequest,
    BulkDeleteResponse,
    ChartPoint,
    DashboardStats,
    Envelope,
    FeedbackPage,
    FeedbackResponse,
    FeedbackStatusUpdate,
    Pagination,
)
from echo_feedback.services import admin_service, feedback_service

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(get_current_admin)],
)


@router.get("/stats", response_model=Envelope[DashboardStats])
async def get_stats(db: SessionDep) -> Envelope[DashboardStats]:
    """Headline dashboard numbers."""
    return Envelope(data=DashboardStats.model_validate(admin_service.dashboard_stats(db)))


@router.get("/feedbacks", response_model=FeedbackPage)
async def get_feedbacks(
    db: SessionDep,
    feedback_status: str | None = Query("all", alias="status"),
    keyword: str | None = Query(None),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    limit: int | None = Query(None),
    skip: int | None = Query(None),
) -> FeedbackPage:
    """Feedback of every status, filterable and paginated."""
    page = admin_service.filter_feedback(
        db,
        status=feedback_status,
        keyword=keyword,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        skip=skip,
    )
    return FeedbackPage(
        count=len(page.items),
        total=page.total,
        pagination=Pagination(limit=page.limit, skip=page.skip),
        data=[FeedbackResponse.model_validate(item) for item in page.items],
    )


@router.get("/feedbacks/chart-data", response_model=Envelope[list[ChartPoint]])
async def get_chart_data(db: SessionDep) -> Envelope[list[ChartPoint]]:
    """Daily feedback counts for the last week."""
    return Envelope(
        data=[ChartPoint.model_validate(point) for point in admin_service.chart_data(db)]
    )


@router.put("/feedbacks/{feedback_id}/status", response_model=Envelope[FeedbackResponse])
async def update_feedback_status(
    feedback_id: int,
    payload: FeedbackStatusUpdate,
    db: SessionDep,
    admin: AdminDep,
) -> Envelope[FeedbackResponse]:
    feedback = feedback_service.set_feedback_status(
        db,
        feedback_id,
        payload.status or "",
        admin_notes=payload.admin_notes,
        admin=admin.email,
    )
    return Envelope(
        data=FeedbackResponse.model_validate(feedback),
        message=f"Feedback status updated to {feedback.status}",
    )


@router.post("/feedbacks/bulk-delete", response_model=BulkDeleteResponse)
async def bulk_delete_feedbacks(
    payload: BulkDeleteRequest,
    db: SessionDep,
    admin: AdminDep,
) -> BulkDeleteResponse:
    deleted = feedback_service.bulk_delete_feedback(db, payload.ids, admin=admin.email)
    return BulkDeleteResponse(deleted_count=deleted)


@router.get("/audit-log", response_model=AuditLogPage)
async def get_audit_log(
    db: SessionDep,
    action: str | None = Query(None),
    severity: str | None = Query(None),
    limit: int | None = Query(None),
    skip: int | None = Query(None),
) -> AuditLogPage:
    """Administrative actions, newest first."""
    page = admin_service.list_audit_logs(
        db,
        action=action,
        severity=severity,
        limit=limit,
        skip=skip,
    )
    return AuditLogPage(
        count=len(page.items),
        total=page.total,
        pagination=Pagination(limit=page.limit, skip=page.skip),
        data=[AuditLogResponse.model_validate(item) for item in page.items],
    )
