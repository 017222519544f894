"""Data models for the booking endpoint."""

from .booking import BookingRequest, BookingResponse, ErrorResponse

__all__ = ["BookingRequest", "BookingResponse", "ErrorResponse"]
