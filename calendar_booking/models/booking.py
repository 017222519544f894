"""Pydantic models for booking requests and responses."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class BookingRequest(BaseModel):
    """Fields the caller posts to book a slot."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    start: str = Field(min_length=1)  # ISO-8601
    end: str = Field(min_length=1)  # ISO-8601
    summary: str = Field(min_length=1)
    description: Optional[str] = None
    attendee_email: Optional[str] = Field(default=None, alias="attendeeEmail")


class BookingResponse(BaseModel):
    """Body returned after a successful booking."""

    ok: bool = True
    event_id: str = Field(serialization_alias="eventId")
    link: str = ""


class ErrorResponse(BaseModel):
    """Body returned for any rejected or failed booking."""

    error: str
    detail: Optional[str] = None
    busy: Optional[list[Any]] = None  # as reported by freeBusy
