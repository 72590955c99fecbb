"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Generic, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


def _ensure_utc(value: datetime) -> datetime:
    # SQLite returns naive datetimes; every stored timestamp is UTC.
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


UtcDatetime = Annotated[datetime, AfterValidator(_ensure_utc)]


class CamelModel(BaseModel):
    """Base schema speaking camelCase on the wire and snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Envelope(BaseModel, Generic[DataT]):
    """Successful response wrapper: ``{"success": true, "data": ...}``."""

    success: bool = True
    data: DataT
    message: str | None = None


class MessageResponse(BaseModel):
    """Successful response carrying only a human-readable message."""

    success: bool = True
    message: str


class FieldError(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    """Body returned for every failed request."""

    success: bool = False
    error: str
    details: list[FieldError] | None = Field(default=None)
