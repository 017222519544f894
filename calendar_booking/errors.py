"""Error taxonomy for the booking flow.

Collaborators (token exchange, free/busy, insert) raise these; the
orchestrator turns them into ``Failed`` results and the app maps the
``kind`` to an HTTP status.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    CLIENT_INPUT = "client_input"
    CONFIGURATION = "configuration"
    AUTHENTICATION = "authentication"
    CONFLICT = "conflict"
    UPSTREAM = "upstream"


class BookingError(RuntimeError):
    """Base error for anything that stops a booking."""

    kind: ErrorKind = ErrorKind.UPSTREAM


class ClientInputError(BookingError):
    """Request is missing required fields."""

    kind = ErrorKind.CLIENT_INPUT


class ConfigurationError(BookingError):
    """Credential blob or calendar id is absent or unusable."""

    kind = ErrorKind.CONFIGURATION


class AuthenticationError(BookingError):
    """Assertion signing or token exchange failed."""

    kind = ErrorKind.AUTHENTICATION


class UpstreamError(BookingError):
    """Calendar API returned a non-success status or could not be reached."""

    kind = ErrorKind.UPSTREAM

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)
