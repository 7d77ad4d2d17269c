"""
Civil-time windows and conversion to absolute instants.

Everything in the scheduling core speaks shop-local wall-clock time
("civil time": a naive ``datetime`` with no offset). The calendar store
speaks absolute instants. This module is the only place that attaches
or strips a UTC offset, using the shop's named timezone so daylight
saving transitions are handled by zoneinfo rather than by hand.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Union
from zoneinfo import ZoneInfo

from bay_scheduler.schemas.shop_schema import Service
from bay_scheduler.tools.errors import InvalidInputError

TimezoneLike = Union[str, ZoneInfo]


def resolve_timezone(tz: TimezoneLike) -> ZoneInfo:
    return tz if isinstance(tz, ZoneInfo) else ZoneInfo(tz)


@dataclass(frozen=True)
class Window:
    """Half-open civil interval ``[start, end)``."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start.tzinfo is not None or self.end.tzinfo is not None:
            raise ValueError("Window bounds must be civil (naive) datetimes")
        if self.end <= self.start:
            raise ValueError(f"Window end {self.end} must be after start {self.start}")

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def day(self) -> date:
        return self.start.date()


def parse_civil(text: str, tz: TimezoneLike) -> datetime:
    """Parse an ISO 8601 date-time string into shop civil time.

    Offset-free strings are taken as civil time directly. Strings with an
    offset (or a trailing ``Z``) are absolute instants and are converted
    into the shop's timezone. A bare date means midnight.

    Raises:
        InvalidInputError: If the string is empty or not ISO 8601.
    """
    if not isinstance(text, str) or not text.strip():
        raise InvalidInputError("A date and time is required.")
    raw = text.strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        raise InvalidInputError(
            f"Invalid date format provided: {text}. Please provide ISO 8601 format."
        ) from None
    if parsed.tzinfo is not None:
        return absolute_to_civil(parsed, tz)
    return parsed


def to_window(civil_start: datetime, service: Service) -> Window:
    """Build the occupancy window for a service starting at ``civil_start``."""
    return Window(civil_start, civil_start + timedelta(hours=service.duration_hours))


def civil_to_absolute(civil: datetime, tz: TimezoneLike) -> datetime:
    """Attach the shop timezone to a civil time.

    Times that fall inside a DST gap or fold resolve with ``fold=0``,
    i.e. the offset in force before the transition.
    """
    if civil.tzinfo is not None:
        raise ValueError("civil_to_absolute expects a naive datetime")
    zone = resolve_timezone(tz)
    return civil.replace(tzinfo=zone, fold=0).astimezone(timezone.utc).astimezone(zone)


def absolute_to_civil(instant: datetime, tz: TimezoneLike) -> datetime:
    """Convert an aware instant into shop civil time."""
    if instant.tzinfo is None:
        raise ValueError("absolute_to_civil expects an aware datetime")
    return instant.astimezone(resolve_timezone(tz)).replace(tzinfo=None, fold=0)


def window_to_absolute(window: Window, tz: TimezoneLike) -> tuple[datetime, datetime]:
    """Return the absolute ``(start, end)`` of a window.

    The end is the start instant plus the window's elapsed duration, so a
    window that crosses a DST transition keeps its real length.
    """
    zone = resolve_timezone(tz)
    start = civil_to_absolute(window.start, zone)
    end = (start.astimezone(timezone.utc) + window.duration).astimezone(zone)
    return start, end


def day_bounds(civil: datetime) -> tuple[datetime, datetime]:
    """Civil ``[midnight, next midnight)`` of the day containing ``civil``."""
    start = datetime.combine(civil.date(), time.min)
    return start, start + timedelta(days=1)
