"""User and authentication Pydantic schemas."""
from __future__ import annotations

from pydantic import BaseModel, Field

from .common import CamelModel, UtcDatetime
from .feedback import FeedbackResponse
from .report import ReportResponse


class RegisterRequest(CamelModel):
    first_name: str | None = None
    last_name: str | None = ""
    email: str | None = None
    password: str | None = None


class LoginRequest(CamelModel):
    email: str | None = None
    password: str | None = None


class UserResponse(CamelModel):
    """Public view of an account; never includes the password hash."""

    user_id: str
    first_name: str
    last_name: str
    email: str
    is_admin: bool = False
    status: str
    created_at: UtcDatetime
    last_login: UtcDatetime | None = None


class AdminUserResponse(UserResponse):
    """Account view for administrators, with moderation state."""

    risk_level: str
    reports_received: int
    suspended_at: UtcDatetime | None = None
    banned_at: UtcDatetime | None = None
    suspension_reason: str = ""
    last_active: UtcDatetime | None = None


class UserListItem(AdminUserResponse):
    feedback_count: int = 0


class LoginData(CamelModel):
    user: UserResponse
    access_token: str
    token_type: str = "bearer"


class UserStats(CamelModel):
    total: int
    active: int
    suspended: int
    banned: int
    high_risk: int


class UserListResponse(BaseModel):
    success: bool = True
    data: list[UserListItem]
    stats: UserStats


class UserDetailResponse(CamelModel):
    user: AdminUserResponse
    feedbacks: list[FeedbackResponse] = Field(default_factory=list)
    reports: list[ReportResponse] = Field(default_factory=list)


class UserStatusUpdate(CamelModel):
    status: str | None = None
    reason: str | None = None


class RiskLevelUpdate(CamelModel):
    risk_level: str | None = None


class UserDeleteResponse(CamelModel):
    success: bool = True
    message: str
    feedback_deleted: int
    reports_deleted: int
