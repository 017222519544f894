"""Booking orchestrator: authenticate, check the slot, insert if free.

The flow is a chain of stages. Each stage returns its value or a
``Failed`` result, and ``book`` stops at the first ``Failed``::

    validate -> authenticate -> check_availability -> insert
       |             |                 |                 |
    Failed       Failed        Failed (conflict)      Booked | Failed

Nothing is retried. The insert is never attempted after a conflict. The
free/busy check and the insert are two separate calls, so a booking made
elsewhere between them is not detected.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Union

import httpx
from pydantic import ValidationError

from calendar_booking.calendar_providers.base import (
    AvailabilitySource,
    BusyInterval,
    CalendarEvent,
    EventSink,
    TimeWindow,
)
from calendar_booking.calendar_providers.google import GoogleCalendarProvider
from calendar_booking.config import BookingConfig
from calendar_booking.errors import BookingError, ClientInputError, ErrorKind
from calendar_booking.models.booking import BookingRequest
from calendar_booking.oauth.assertion import build_jwt_assertion
from calendar_booking.oauth.token import GoogleTokenExchanger, TokenExchanger

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "start, end und summary sind erforderlich"
CONFLICT_MESSAGE = "Zeitraum ist bereits belegt"


def redact_pii(value: str) -> str:
    """Mask PII for logging: show first 3 and last 2 chars only."""
    if not value or len(value) <= 5:
        return "***"
    return value[:3] + "***" + value[-2:]


@dataclass(frozen=True)
class Booked:
    event_id: str
    link: str


@dataclass(frozen=True)
class Failed:
    kind: ErrorKind
    detail: str
    busy: list[BusyInterval] = field(default_factory=list)

    @classmethod
    def from_error(cls, exc: BookingError) -> Failed:
        return cls(kind=exc.kind, detail=str(exc))


BookingResult = Union[Booked, Failed]


class BookingOrchestrator:
    """Runs one authenticate-and-book sequence per ``book`` call.

    Collaborators are injected so each stage can be exercised with fakes;
    ``for_google`` wires the real Google clients.
    """

    def __init__(
        self,
        config: BookingConfig,
        token_exchanger: TokenExchanger,
        availability: AvailabilitySource,
        events: EventSink,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._token_exchanger = token_exchanger
        self._availability = availability
        self._events = events
        self._clock = clock

    @classmethod
    def for_google(
        cls, config: BookingConfig, http_client: httpx.AsyncClient
    ) -> BookingOrchestrator:
        provider = GoogleCalendarProvider(http_client, api_base=config.api_base)
        return cls(
            config=config,
            token_exchanger=GoogleTokenExchanger(http_client, token_url=config.token_url),
            availability=provider,
            events=provider,
        )

    # ---- Stages ------------------------------------------------------------

    def validate(self, body: Mapping[str, Any]) -> Union[BookingRequest, Failed]:
        try:
            return BookingRequest.model_validate(dict(body))
        except ValidationError as exc:
            logger.info("Rejected booking request: %d invalid field(s)", exc.error_count())
            return Failed.from_error(ClientInputError(MISSING_FIELDS_MESSAGE))

    async def authenticate(self) -> Union[str, Failed]:
        try:
            credential = self._config.resolve_credential()
            assertion = build_jwt_assertion(
                client_email=credential.client_email,
                private_key=credential.private_key,
                scope=self._config.scope,
                audience=self._config.token_url,
                issued_at=int(self._clock()),
            )
            return await self._token_exchanger.exchange(assertion)
        except BookingError as exc:
            logger.error("Authentication failed: %s", exc)
            return Failed.from_error(exc)

    async def check_availability(
        self, access_token: str, request: BookingRequest
    ) -> Union[list[BusyInterval], Failed]:
        window = TimeWindow(start=request.start, end=request.end)
        try:
            busy = await self._availability.busy_intervals(
                access_token, self._config.calendar_id, window
            )
        except BookingError as exc:
            logger.error("Availability check failed: %s", exc)
            return Failed.from_error(exc)

        if busy:
            logger.info("Slot %s..%s is taken (%d busy)", window.start, window.end, len(busy))
            return Failed(kind=ErrorKind.CONFLICT, detail=CONFLICT_MESSAGE, busy=list(busy))
        return busy

    async def insert(self, access_token: str, request: BookingRequest) -> BookingResult:
        event = CalendarEvent(
            summary=request.summary,
            start=request.start,
            end=request.end,
            time_zone=self._config.time_zone,
            description=request.description or "",
            attendee_email=request.attendee_email or None,
        )
        try:
            created = await self._events.insert_event(
                access_token, self._config.calendar_id, event
            )
        except BookingError as exc:
            logger.error("Event insert failed: %s", exc)
            return Failed.from_error(exc)

        return Booked(event_id=created.event_id, link=created.html_link)

    # ---- Chain -------------------------------------------------------------

    async def book(self, body: Mapping[str, Any]) -> BookingResult:
        request = self.validate(body)
        if isinstance(request, Failed):
            return request

        access_token = await self.authenticate()
        if isinstance(access_token, Failed):
            return access_token

        busy = await self.check_availability(access_token, request)
        if isinstance(busy, Failed):
            return busy

        result = await self.insert(access_token, request)
        if isinstance(result, Booked):
            logger.info(
                "Booked %r %s..%s as %s (attendee=%s)",
                request.summary,
                request.start,
                request.end,
                result.event_id,
                redact_pii(request.attendee_email or ""),
            )
        return result
