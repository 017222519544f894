"""Abstract collaborators for querying availability and creating events.

Defines the interfaces the booking orchestrator talks to. The Google
implementation lives in ``google.py``; tests substitute in-memory fakes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class TimeWindow:
    """A requested booking window, as ISO-8601 strings passed through verbatim."""

    start: str
    end: str


@dataclass(frozen=True)
class BusyInterval:
    """A busy block reported by the free/busy query.

    Entries that aren't ``{start, end}`` objects keep their original value
    in ``raw``; they still count as busy.
    """

    start: str
    end: str
    raw: Any = None
    structured: bool = True

    @classmethod
    def from_payload(cls, entry: Any) -> "BusyInterval":
        if isinstance(entry, dict):
            return cls(start=str(entry.get("start", "")), end=str(entry.get("end", "")))
        return cls(start="", end="", raw=entry, structured=False)

    def to_dict(self) -> Any:
        if not self.structured:
            return self.raw
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class CalendarEvent:
    """Represents a calendar event to be created."""

    summary: str
    start: str
    end: str
    time_zone: str
    description: str = ""
    attendee_email: Optional[str] = None

    def to_resource(self) -> dict[str, Any]:
        """Google Calendar event resource; ``attendees`` only when there is one."""
        body: dict[str, Any] = {
            "summary": self.summary,
            "description": self.description,
            "start": {"dateTime": self.start, "timeZone": self.time_zone},
            "end": {"dateTime": self.end, "timeZone": self.time_zone},
        }
        if self.attendee_email:
            body["attendees"] = [{"email": self.attendee_email}]
        return body


@dataclass(frozen=True)
class CreatedEvent:
    """The inserted event as confirmed by the calendar."""

    event_id: str
    html_link: str = ""


class AvailabilitySource(ABC):
    @abstractmethod
    async def busy_intervals(
        self, access_token: str, calendar_id: str, window: TimeWindow
    ) -> list[BusyInterval]:
        """Return the busy intervals overlapping ``window``.

        Args:
            access_token: Bearer token for the calendar API.
            calendar_id: The calendar to query.
            window: ``[start, end)`` to check.

        Returns:
            Busy intervals in the order the calendar reported them.
            Empty when the window is free.
        """


class EventSink(ABC):
    @abstractmethod
    async def insert_event(
        self, access_token: str, calendar_id: str, event: CalendarEvent
    ) -> CreatedEvent:
        """Create a calendar event.

        Args:
            access_token: Bearer token for the calendar API.
            calendar_id: The calendar to create the event on.
            event: Event details.

        Returns:
            The created event's id and browser link.
        """
