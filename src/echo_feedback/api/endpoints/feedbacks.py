"""Public feedback endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from echo_feedback.api.dependencies import ClientIdentifierDep, SessionDep
from echo_feedback.schemas import (
    Envelope,
    FeedbackCreate,
    FeedbackDelete,
    FeedbackResponse,
    LikeToggle,
    MessageResponse,
)
from echo_feedback.services import feedback_service

router = APIRouter(prefix="/feedbacks", tags=["feedbacks"])


@router.post(
    "",
    response_model=Envelope[FeedbackResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_feedback(payload: FeedbackCreate, db: SessionDep) -> Envelope[FeedbackResponse]:
    """Submit feedback as a registered, active user."""
    feedback = feedback_service.create_feedback(
        db,
        user_id=payload.user_id,
        user_name=payload.user_name,
        user_email=payload.user_email,
        message=payload.message,
    )
    return Envelope(data=FeedbackResponse.model_validate(feedback))


@router.get("", response_model=Envelope[list[FeedbackResponse]])
async def list_feedback(
    db: SessionDep,
    skip: int = Query(0, ge=0),
    limit: int | None = Query(None, ge=1, le=100),
) -> Envelope[list[FeedbackResponse]]:
    """List visible feedback, newest first."""
    items = feedback_service.list_feedback(db, skip=skip, limit=limit)
    return Envelope(data=[FeedbackResponse.model_validate(item) for item in items])


@router.get("/search", response_model=Envelope[list[FeedbackResponse]])
async def search_feedback(
    db: SessionDep,
    keyword: str | None = Query(None),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
) -> Envelope[list[FeedbackResponse]]:
    """Search visible feedback by keyword and inclusive creation-date range."""
    items = feedback_service.search_feedback(
        db,
        keyword=keyword,
        start_date=start_date,
        end_date=end_date,
        visible_only=True,
    )
    return Envelope(data=[FeedbackResponse.model_validate(item) for item in items])


@router.get("/{feedback_id}", response_model=Envelope[FeedbackResponse])
async def get_feedback(feedback_id: int, db: SessionDep) -> Envelope[FeedbackResponse]:
    feedback = feedback_service.get_feedback(db, feedback_id)
    return Envelope(data=FeedbackResponse.model_validate(feedback))


@router.put("/{feedback_id}/like", response_model=Envelope[FeedbackResponse])
async def toggle_like(
    feedback_id: int,
    db: SessionDep,
    client_identifier: ClientIdentifierDep,
    payload: LikeToggle | None = None,
) -> Envelope[FeedbackResponse]:
    """Like the feedback, or remove the caller's like if already present."""
    identifier = (payload.user_identifier if payload else None) or client_identifier
    feedback = feedback_service.toggle_like(db, feedback_id, identifier)
    return Envelope(data=FeedbackResponse.model_validate(feedback))


@router.delete("/{feedback_id}", response_model=MessageResponse)
async def delete_feedback(
    feedback_id: int,
    payload: FeedbackDelete,
    db: SessionDep,
) -> MessageResponse:
    """Delete feedback on behalf of its author."""
    feedback_service.delete_feedback(db, feedback_id, payload.user_id or "")
    return MessageResponse(message="Feedback deleted successfully")
