"""Application configuration via environment variables."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Optional

from pydantic_settings import BaseSettings

from calendar_booking.errors import ConfigurationError

log = logging.getLogger("calendar_booking.config")


@dataclass(frozen=True)
class ServiceAccountCredential:
    """The two fields of a service-account key the JWT-bearer grant needs."""

    client_email: str
    private_key: str

    @classmethod
    def from_json(cls, raw_value: str) -> ServiceAccountCredential:
        if not raw_value:
            raise ConfigurationError("Missing GOOGLE_SERVICE_ACCOUNT_JSON")

        try:
            payload = json.loads(raw_value)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(
                f"GOOGLE_SERVICE_ACCOUNT_JSON must be valid JSON: {exc.msg}"
            ) from exc

        if not isinstance(payload, dict):
            raise ConfigurationError("GOOGLE_SERVICE_ACCOUNT_JSON must decode to a JSON object")

        client_email = payload.get("client_email")
        private_key = payload.get("private_key")
        if not isinstance(client_email, str) or not client_email:
            raise ConfigurationError("Service account JSON incomplete")
        if not isinstance(private_key, str) or not private_key:
            raise ConfigurationError("Service account JSON incomplete")

        return cls(client_email=client_email, private_key=private_key)


@dataclass(frozen=True)
class BookingConfig:
    """Everything the orchestrator needs.

    The calendar id is checked when the config is built. The credential is
    parsed from ``credential_json`` only when ``resolve_credential`` is
    called, after the request body has been validated and before any
    network call.
    """

    calendar_id: str
    credential: Optional[ServiceAccountCredential] = None
    credential_json: str = ""
    time_zone: str = "Europe/Berlin"
    scope: str = "https://www.googleapis.com/auth/calendar"
    token_url: str = "https://oauth2.googleapis.com/token"
    api_base: str = "https://www.googleapis.com/calendar/v3"

    def resolve_credential(self) -> ServiceAccountCredential:
        """Return the service account credential, raising ConfigurationError if unusable."""
        if self.credential is not None:
            return self.credential
        return ServiceAccountCredential.from_json(self.credential_json)


class Settings(BaseSettings):
    # Google Calendar
    google_service_account_json: str = ""
    google_calendar_id: str = ""
    calendar_timezone: str = "Europe/Berlin"
    google_calendar_scope: str = "https://www.googleapis.com/auth/calendar"

    # Google endpoints
    google_token_url: str = "https://oauth2.googleapis.com/token"
    google_calendar_api_base: str = "https://www.googleapis.com/calendar/v3"

    # Server
    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    def validate_startup(self) -> list[str]:
        """Validate configuration at startup. Returns warnings for the log."""
        warnings: list[str] = []
        _placeholders = {"{...}", "path/to/service-account.json", "your-calendar-id"}

        if not self.google_calendar_id:
            warnings.append("GOOGLE_CALENDAR_ID not set. Bookings will fail until it is.")
        elif self.google_calendar_id in _placeholders:
            warnings.append("GOOGLE_CALENDAR_ID is a placeholder; bookings will fail.")

        if not self.google_service_account_json:
            warnings.append(
                "GOOGLE_SERVICE_ACCOUNT_JSON not set. Bookings will fail until it is."
            )
        elif self.google_service_account_json in _placeholders:
            warnings.append(
                "GOOGLE_SERVICE_ACCOUNT_JSON is a placeholder; calendar integration disabled."
            )

        return warnings

    def booking_config(self) -> BookingConfig:
        """Resolve the per-request booking configuration.

        Raises ConfigurationError when the calendar id is missing. The
        credential blob is carried unparsed; see ``resolve_credential``.
        """
        if not self.google_calendar_id:
            raise ConfigurationError("Missing GOOGLE_CALENDAR_ID")

        return BookingConfig(
            calendar_id=self.google_calendar_id,
            credential_json=self.google_service_account_json,
            time_zone=self.calendar_timezone,
            scope=self.google_calendar_scope,
            token_url=self.google_token_url,
            api_base=self.google_calendar_api_base.rstrip("/"),
        )


settings = Settings()
