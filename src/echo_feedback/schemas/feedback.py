"""Feedback-related Pydantic schemas."""
from __future__ import annotations

from typing import Any

from pydantic import Field

from .common import CamelModel, UtcDatetime


class FeedbackCreate(CamelModel):
    """Schema for submitting feedback.

    Fields are optional here so that the service can report every invalid
    field at once.
    """

    user_id: str | None = None
    user_name: str | None = None
    user_email: str | None = None
    message: str | None = None


class LikeToggle(CamelModel):
    user_identifier: str | None = Field(
        default=None,
        description="Caller identity; defaults to the client address.",
    )


class FeedbackDelete(CamelModel):
    user_id: str | None = None


class FeedbackResponse(CamelModel):
    """Schema for feedback returned by the API."""

    id: int
    user_id: str
    user_name: str
    user_email: str
    message: str
    likes: int
    liked_by: list[str] = Field(default_factory=list)
    comment_count: int
    status: str
    is_visible: bool
    reports_count: int
    reported_by: list[dict[str, Any]] = Field(default_factory=list)
    admin_notes: str = ""
    created_at: UtcDatetime
    updated_at: UtcDatetime
