"""Schemas for the admin dashboard endpoints."""
from __future__ import annotations

from pydantic import BaseModel, Field

from .common import CamelModel, UtcDatetime
from .feedback import FeedbackResponse


class DashboardStats(CamelModel):
    total_feedback: int
    total_unique_users: int
    active_users_this_week: int
    this_week_count: int
    flagged_count: int
    feedback_growth: int


class ChartPoint(BaseModel):
    date: str
    count: int


class Pagination(BaseModel):
    limit: int
    skip: int


class FeedbackPage(BaseModel):
    """Filtered admin feedback table."""

    success: bool = True
    count: int
    total: int
    pagination: Pagination
    data: list[FeedbackResponse]


class FeedbackStatusUpdate(CamelModel):
    status: str | None = None
    admin_notes: str | None = None


class BulkDeleteRequest(BaseModel):
    ids: list[int] = Field(default_factory=list)


class BulkDeleteResponse(CamelModel):
    success: bool = True
    deleted_count: int


class AuditLogResponse(CamelModel):
    id: int
    timestamp: UtcDatetime
    admin: str
    action: str
    target_type: str
    target_id: str
    details: str
    severity: str


class AuditLogPage(BaseModel):
    success: bool = True
    count: int
    total: int
    pagination: Pagination
    data: list[AuditLogResponse]
