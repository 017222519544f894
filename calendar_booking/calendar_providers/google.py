"""Google Calendar provider implementation.

Talks to the Calendar API v3 REST endpoints directly over ``httpx`` with a
bearer token obtained through the service-account JWT-bearer grant (see
``calendar_booking.oauth``). The token is passed in per call; nothing is
cached on the provider.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from calendar_booking.errors import UpstreamError
from calendar_booking.http_utils import failure_message, is_success, read_json

from .base import (
    AvailabilitySource,
    BusyInterval,
    CalendarEvent,
    CreatedEvent,
    EventSink,
    TimeWindow,
)

logger = logging.getLogger(__name__)

GOOGLE_CALENDAR_API_BASE_URL = "https://www.googleapis.com/calendar/v3"


class GoogleCalendarProvider(AvailabilitySource, EventSink):
    """Free/busy queries and event inserts against Google Calendar API v3."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_base: str = GOOGLE_CALENDAR_API_BASE_URL,
    ) -> None:
        self._http_client = http_client
        self._api_base = api_base.rstrip("/")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _post_json(
        self, label: str, path: str, access_token: str, body: dict[str, Any]
    ) -> Any:
        """POST ``body`` with bearer auth; return the decoded response or raise."""
        url = f"{self._api_base}{path}"
        try:
            response = await self._http_client.post(
                url,
                json=body,
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except httpx.HTTPError as exc:
            raise UpstreamError(f"{label}: request failed: {exc}") from exc

        data = read_json(response)
        if not is_success(response):
            raise UpstreamError(
                failure_message(label, response, data),
                status_code=response.status_code,
            )
        return data

    # ------------------------------------------------------------------
    # AvailabilitySource / EventSink interface
    # ------------------------------------------------------------------

    async def busy_intervals(
        self, access_token: str, calendar_id: str, window: TimeWindow
    ) -> list[BusyInterval]:
        """Query the freeBusy endpoint for one calendar.

        A missing ``calendars.<id>.busy`` entry, or one that isn't a list,
        reads as no conflicts.
        """
        data = await self._post_json(
            "FreeBusy error",
            "/freeBusy",
            access_token,
            {
                "timeMin": window.start,
                "timeMax": window.end,
                "items": [{"id": calendar_id}],
            },
        )

        calendars = data.get("calendars") if isinstance(data, dict) else None
        entry = calendars.get(calendar_id) if isinstance(calendars, dict) else None
        busy_payload = entry.get("busy") if isinstance(entry, dict) else None
        if not isinstance(busy_payload, list):
            return []

        busy: list[BusyInterval] = []
        for interval in busy_payload:
            if not isinstance(interval, dict):
                logger.warning("Unexpected busy interval shape, treating as busy: %r", interval)
            busy.append(BusyInterval.from_payload(interval))

        logger.info(
            "FreeBusy %s..%s on %s: %d busy interval(s)",
            window.start,
            window.end,
            calendar_id,
            len(busy),
        )
        return busy

    async def insert_event(
        self, access_token: str, calendar_id: str, event: CalendarEvent
    ) -> CreatedEvent:
        """Insert an event into the Google Calendar."""
        data = await self._post_json(
            "Insert error",
            f"/calendars/{quote(calendar_id, safe='')}/events",
            access_token,
            event.to_resource(),
        )

        event_id = data.get("id") if isinstance(data, dict) else None
        if not isinstance(event_id, str) or not event_id:
            raise UpstreamError("Insert error: response did not include an event id")

        logger.info("Created event %s on calendar %s", event_id, calendar_id)

        return CreatedEvent(event_id=event_id, html_link=str(data.get("htmlLink", "")))
