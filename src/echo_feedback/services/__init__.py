# src/echo_feedback/services/__init__.py
"""Business logic services for the Echo application."""

from .moderation import ModerationService, ReportParty

__all__ = [
    "ModerationService",
    "ReportParty",
]
