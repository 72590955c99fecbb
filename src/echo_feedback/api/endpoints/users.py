"""Administrative user-management endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from echo_feedback.api.dependencies import AdminDep, SessionDep, get_current_admin
from echo_feedback.schemas import (
    AdminUserResponse,
    Envelope,
    FeedbackResponse,
    ReportResponse,
    RiskLevelUpdate,
    UserDeleteResponse,
    UserDetailResponse,
    UserListItem,
    UserListResponse,
    UserStats,
    UserStatusUpdate,
)
from echo_feedback.services import user_service

router = APIRouter(
    prefix="/users",
    tags=["users"],
    dependencies=[Depends(get_current_admin)],
)


@router.get("", response_model=UserListResponse)
async def list_users(
    db: SessionDep,
    user_status: str | None = Query(None, alias="status"),
    risk_level: str | None = Query(None, alias="riskLevel"),
    search: str | None = Query(None),
) -> UserListResponse:
    """List users with live feedback/report counts and population stats."""
    listing = user_service.list_users(
        db,
        status=user_status,
        risk_level=risk_level,
        search=search,
    )
    items = []
    for user, feedback_count, reports_received in listing.users:
        item = UserListItem.model_validate(user)
        item.feedback_count = feedback_count
        item.reports_received = reports_received
        items.append(item)
    return UserListResponse(data=items, stats=UserStats.model_validate(listing.stats))


@router.get("/{user_id}", response_model=Envelope[UserDetailResponse])
async def get_user(user_id: str, db: SessionDep) -> Envelope[UserDetailResponse]:
    """Return a user with their feedback and the reports filed against them."""
    detail = user_service.get_user_detail(db, user_id)
    return Envelope(
        data=UserDetailResponse(
            user=AdminUserResponse.model_validate(detail.user),
            feedbacks=[FeedbackResponse.model_validate(item) for item in detail.feedbacks],
            reports=[ReportResponse.model_validate(item) for item in detail.reports],
        )
    )


@router.put("/{user_id}/status", response_model=Envelope[AdminUserResponse])
async def update_user_status(
    user_id: str,
    payload: UserStatusUpdate,
    db: SessionDep,
    admin: AdminDep,
) -> Envelope[AdminUserResponse]:
    user = user_service.set_user_status(
        db,
        user_id,
        payload.status or "",
        payload.reason,
        admin=admin.email,
    )
    return Envelope(
        data=AdminUserResponse.model_validate(user),
        message=f"User status updated to {user.status}",
    )


@router.put("/{user_id}/risk", response_model=Envelope[AdminUserResponse])
async def update_user_risk(
    user_id: str,
    payload: RiskLevelUpdate,
    db: SessionDep,
) -> Envelope[AdminUserResponse]:
    user = user_service.set_risk_level(db, user_id, payload.risk_level or "")
    return Envelope(
        data=AdminUserResponse.model_validate(user),
        message=f"Risk level updated to {user.risk_level}",
    )


@router.delete("/{user_id}", response_model=UserDeleteResponse)
async def delete_user(user_id: str, db: SessionDep, admin: AdminDep) -> UserDeleteResponse:
    """Delete a user along with their feedback and every report naming them."""
    counts = user_service.delete_user(db, user_id, admin=admin.email)
    return UserDeleteResponse(
        message="User and associated data deleted successfully",
        feedback_deleted=counts["feedbackDeleted"],
        reports_deleted=counts["reportsDeleted"],
    )
