"""
Calendar store interface and an in-process implementation.

The calendar store is the single source of truth for booked intervals.
The in-memory store keeps the same event payloads the Google Calendar
store would send, so everything that reads it goes through the same
event codec as production.
"""

import itertools
import logging
from datetime import datetime
from typing import Any, Protocol, Sequence

from bay_scheduler.schemas.booking_schema import Appointment
from bay_scheduler.schemas.shop_schema import Bay
from bay_scheduler.tools.availability import BusyInterval
from bay_scheduler.tools.event_codec import decode_event, encode_event, event_window
from bay_scheduler.tools.timewindow import TimezoneLike, Window, resolve_timezone

logger = logging.getLogger(__name__)


class CalendarStore(Protocol):
    """Durable per-bay calendar, queried and written in shop civil time."""

    async def busy(
        self, bays: Sequence[Bay], civil_min: datetime, civil_max: datetime
    ) -> list[BusyInterval]:
        """Busy intervals intersecting ``[civil_min, civil_max)`` for each bay."""
        ...

    async def list_appointments(
        self, bay: Bay, civil_min: datetime, civil_max: datetime
    ) -> list[Appointment]:
        """Appointments intersecting ``[civil_min, civil_max)``, oldest first."""
        ...

    async def insert(self, bay: Bay, appointment: Appointment) -> str:
        """Persist one appointment and return the store's event id.

        Not idempotent: retrying can create a duplicate event.
        """
        ...


class InMemoryCalendarStore:
    """Event payloads held in a dict, keyed by bay id."""

    def __init__(self, tz: TimezoneLike) -> None:
        self.tz = resolve_timezone(tz)
        self._events: dict[str, list[dict[str, Any]]] = {}
        self._ids = itertools.count(1)

    def seed(self, bay_id: str, event: dict[str, Any]) -> None:
        """Add a raw event, e.g. one entered by staff directly in the calendar."""
        event = dict(event)
        event.setdefault("id", f"evt-{next(self._ids)}")
        self._events.setdefault(bay_id, []).append(event)

    def raw_events(self, bay_id: str) -> list[dict[str, Any]]:
        return list(self._events.get(bay_id, []))

    def _intersecting(self, bay_id: str, civil_min: datetime, civil_max: datetime):
        for event in self._events.get(bay_id, []):
            if event.get("status") == "cancelled":
                continue
            start, end = event_window(event, self.tz)
            if end > start and start < civil_max and end > civil_min:
                yield event, start, end

    async def busy(
        self, bays: Sequence[Bay], civil_min: datetime, civil_max: datetime
    ) -> list[BusyInterval]:
        return [
            BusyInterval(bay.id, Window(start, end))
            for bay in bays
            for event, start, end in self._intersecting(bay.id, civil_min, civil_max)
            if event.get("transparency") != "transparent"
        ]

    async def list_appointments(
        self, bay: Bay, civil_min: datetime, civil_max: datetime
    ) -> list[Appointment]:
        found = [
            decode_event(event, bay.id, self.tz)
            for event, _, _ in self._intersecting(bay.id, civil_min, civil_max)
        ]
        return sorted(found, key=lambda a: a.start)

    async def insert(self, bay: Bay, appointment: Appointment) -> str:
        body = encode_event(appointment, self.tz)
        event_id = f"evt-{next(self._ids)}"
        body["id"] = event_id
        self._events.setdefault(bay.id, []).append(body)
        logger.debug("Stored event %s in %s", event_id, bay.id)
        return event_id
