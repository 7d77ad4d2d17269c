"""Service catalog with durations and prices."""

import logging
from typing import Iterable

from bay_scheduler.schemas.shop_schema import Service
from bay_scheduler.tools.errors import InvalidInputError

logger = logging.getLogger(__name__)

DEFAULT_SERVICES: tuple[Service, ...] = (
    Service(name="Oil Change", duration_hours=1, price=49.99),
    Service(name="Annual Inspection", duration_hours=2, price=99.99),
    Service(name="Fault Diagnosis", duration_hours=3, price=149.99),
    Service(name="Tire Service", duration_hours=1, price=39.99),
)


class ServiceCatalog:
    """Immutable name -> Service lookup.

    Names match exactly and case-sensitively. An unknown name either
    falls back to a ``default_duration_hours`` service (the historical
    behaviour the booking form relied on) or, in strict mode, is
    rejected as invalid input.
    """

    def __init__(
        self,
        services: Iterable[Service] = DEFAULT_SERVICES,
        default_duration_hours: int = 1,
        strict: bool = False,
    ) -> None:
        self._services: dict[str, Service] = {s.name: s for s in services}
        if default_duration_hours < 1:
            raise ValueError("default_duration_hours must be >= 1")
        self.default_duration_hours = default_duration_hours
        self.strict = strict

    def lookup(self, name: str) -> Service:
        service = self._services.get(name)
        if service is not None:
            return service
        if self.strict:
            valid = ", ".join(self._services)
            raise InvalidInputError(f"Unknown service '{name}'. Valid services: {valid}.")
        logger.warning(
            "Unknown service %r, falling back to %d hour(s)", name, self.default_duration_hours
        )
        return Service(name=name, duration_hours=self.default_duration_hours, price=0.0)

    def is_known(self, name: str) -> bool:
        return name in self._services

    def names(self) -> list[str]:
        return list(self._services)

    def all(self) -> list[Service]:
        return list(self._services.values())
