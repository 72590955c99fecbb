"""Domain exceptions raised by the service layer.

Each exception carries the HTTP status code the API layer translates it to,
so services stay free of any FastAPI imports.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "EchoError",
    "ValidationError",
    "AuthenticationError",
    "ForbiddenError",
    "NotFoundError",
    "DuplicateError",
]


class EchoError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500

    def __init__(self, message: str, details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(EchoError):
    """Missing or malformed input, or a value outside its allowed bounds."""

    status_code = 400


class AuthenticationError(EchoError):
    """Credentials were missing or did not match."""

    status_code = 401


class ForbiddenError(EchoError):
    """The actor is not allowed to perform the operation."""

    status_code = 403


class NotFoundError(EchoError):
    """The referenced record does not exist."""

    status_code = 404


class DuplicateError(EchoError):
    """A uniqueness constraint would be violated."""

    status_code = 400
