"""
Availability engine: a boolean admissibility gate for one bay.

A requested window is admissible for a bay when it fits entirely inside
that day's operating hours, the day is not a closed weekday, and it
does not overlap anything already occupying the bay. The engine is pure
and never raises for an unavailable slot; unavailability is an ordinary
return value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from enum import Enum
from typing import Iterable, Protocol

from bay_scheduler.schemas.shop_schema import BusinessHours
from bay_scheduler.tools.timewindow import Window

logger = logging.getLogger(__name__)


class Occupancy(Protocol):
    """Anything that holds a bay for a window (appointments, busy blocks)."""

    @property
    def bay_id(self) -> str: ...

    @property
    def window(self) -> Window: ...


@dataclass(frozen=True)
class BusyInterval:
    """An anonymous busy block read from the calendar store."""

    bay_id: str
    window: Window


class Verdict(str, Enum):
    AVAILABLE = "available"
    OUTSIDE_HOURS = "outside_hours"
    CLOSED_DAY = "closed_day"
    CONFLICT = "conflict"


def overlaps(a: Window, b: Window) -> bool:
    """Open-interval overlap test; windows that only touch do not overlap."""
    return a.start < b.end and a.end > b.start


class AvailabilityEngine:
    """Evaluates a window against business hours and same-bay occupancy."""

    def __init__(self, business_hours: BusinessHours) -> None:
        self.business_hours = business_hours

    def verdict(self, window: Window, bay_id: str, known: Iterable[Occupancy]) -> Verdict:
        hours = self.business_hours
        day_hours = hours.hours_for(window.start.weekday())
        # Closed days are still checked against regular hours first.
        open_hour, close_hour = day_hours or (hours.open_hour, hours.close_hour)
        day_start = datetime.combine(window.day, time.min)
        if window.start < day_start + timedelta(hours=open_hour):
            return Verdict.OUTSIDE_HOURS
        if window.end > day_start + timedelta(hours=close_hour):
            return Verdict.OUTSIDE_HOURS

        if day_hours is None:
            return Verdict.CLOSED_DAY

        for occupied in known:
            if occupied.bay_id == bay_id and overlaps(window, occupied.window):
                return Verdict.CONFLICT
        return Verdict.AVAILABLE

    def is_available(self, window: Window, bay_id: str, known: Iterable[Occupancy]) -> bool:
        return self.verdict(window, bay_id, known) is Verdict.AVAILABLE
