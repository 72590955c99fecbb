"""
Pydantic schemas for API request/response models.

Request and response bodies use camelCase keys; Python attributes stay snake_case.
"""

from .admin import (
    AuditLogPage,
    AuditLogResponse,
    BulkDeleteRequest,
    BulkDeleteResponse,
    ChartPoint,
    DashboardStats,
    FeedbackPage,
    FeedbackStatusUpdate,
    Pagination,
)
from .common import CamelModel, Envelope, ErrorResponse, FieldError, MessageResponse
from .feedback import FeedbackCreate, FeedbackDelete, FeedbackResponse, LikeToggle
from .report import ReportCreate, ReportPartyIn, ReportPartyOut, ReportResponse, ReportReview
from .user import (
    AdminUserResponse,
    LoginData,
    LoginRequest,
    RegisterRequest,
    RiskLevelUpdate,
    UserDeleteResponse,
    UserDetailResponse,
    UserListItem,
    UserListResponse,
    UserResponse,
    UserStats,
    UserStatusUpdate,
)

__all__ = [
    "AuditLogPage", "AuditLogResponse", "BulkDeleteRequest", "BulkDeleteResponse",
    "ChartPoint", "DashboardStats", "FeedbackPage", "FeedbackStatusUpdate", "Pagination",
    "CamelModel", "Envelope", "ErrorResponse", "FieldError", "MessageResponse",
    "FeedbackCreate", "FeedbackDelete", "FeedbackResponse", "LikeToggle",
    "ReportCreate", "ReportPartyIn", "ReportPartyOut", "ReportResponse", "ReportReview",
    "AdminUserResponse", "LoginData", "LoginRequest", "RegisterRequest", "RiskLevelUpdate",
    "UserDeleteResponse", "UserDetailResponse", "UserListItem", "UserListResponse",
    "UserResponse", "UserStats", "UserStatusUpdate",
]
