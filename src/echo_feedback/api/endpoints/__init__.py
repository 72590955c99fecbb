"""API endpoint modules."""

from .admin import router as admin_router
from .auth import router as auth_router
from .feedbacks import router as feedbacks_router
from .reports import router as reports_router
from .users import router as users_router

__all__ = [
    "admin_router",
    "auth_router",
    "feedbacks_router",
    "reports_router",
    "users_router",
]
