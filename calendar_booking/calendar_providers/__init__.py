"""Calendar provider abstractions and implementations."""

from .base import (
    AvailabilitySource,
    BusyInterval,
    CalendarEvent,
    CreatedEvent,
    EventSink,
    TimeWindow,
)

__all__ = [
    "AvailabilitySource",
    "BusyInterval",
    "CalendarEvent",
    "CreatedEvent",
    "EventSink",
    "TimeWindow",
]
