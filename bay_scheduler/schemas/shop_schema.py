"""Static shop configuration models: services, bays, and operating hours."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Service(BaseModel):
    """A bookable service. Duration is in whole hours."""

    model_config = ConfigDict(frozen=True)

    name: str
    duration_hours: int = Field(gt=0)
    price: float = 0.0


class Bay(BaseModel):
    """One physical service bay and the external calendar that backs it."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    calendar_id: str = ""


class BusinessHours(BaseModel):
    """Civil operating hours, with optional per-weekday overrides.

    ``overrides`` maps a weekday (Monday=0) to an ``(open, close)`` pair;
    ``closed_weekdays`` wins over any override.
    """

    model_config = ConfigDict(frozen=True)

    open_hour: int = Field(default=8, ge=0, le=23)
    close_hour: int = Field(default=18, ge=1, le=24)
    closed_weekdays: frozenset[int] = frozenset({6})
    overrides: dict[int, tuple[int, int]] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_ranges(self) -> "BusinessHours":
        if self.close_hour <= self.open_hour:
            raise ValueError("close_hour must be after open_hour")
        for weekday, (open_h, close_h) in self.overrides.items():
            if not 0 <= weekday <= 6:
                raise ValueError(f"override weekday out of range: {weekday}")
            if not 0 <= open_h < close_h <= 24:
                raise ValueError(f"invalid override hours for weekday {weekday}")
        return self

    def hours_for(self, weekday: int) -> Optional[tuple[int, int]]:
        """Return ``(open, close)`` for a weekday, or None when closed."""
        if weekday in self.closed_weekdays:
            return None
        return self.overrides.get(weekday, (self.open_hour, self.close_hour))
