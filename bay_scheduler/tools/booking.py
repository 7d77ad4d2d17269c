"""
Booking transaction: re-validate, persist, then log.

A booking is granted only against a snapshot read from the calendar
store immediately before the write. That narrows, but does not close,
the check-then-act race between two sessions booking the same slot;
the store itself offers no lock. The write is not idempotent, so a
caller that sees PERSISTENCE_ERROR must run the whole transaction
again rather than retrying the write alone.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Union

from bay_scheduler.logging_context import get_session_logger
from bay_scheduler.schemas.booking_schema import Appointment, BookingRequest
from bay_scheduler.schemas.shop_schema import Bay, Service
from bay_scheduler.tools.assignment import BayAssignmentPolicy
from bay_scheduler.tools.availability import BusyInterval, Verdict
from bay_scheduler.tools.calendar_store import CalendarStore
from bay_scheduler.tools.call_log import CallJournal
from bay_scheduler.tools.errors import DenialReason, InvalidInputError, PersistenceError
from bay_scheduler.tools.services import ServiceCatalog
from bay_scheduler.tools.timewindow import (
    TimezoneLike,
    Window,
    day_bounds,
    parse_civil,
    resolve_timezone,
    to_window,
)

logger = get_session_logger(__name__)


@dataclass(frozen=True)
class Confirmed:
    appointment: Appointment

    @property
    def appointment_id(self) -> str:
        return self.appointment.id


@dataclass(frozen=True)
class Denied:
    reason: DenialReason
    message: str


BookingOutcome = Union[Confirmed, Denied]


def _new_appointment_id() -> str:
    return f"APT-{uuid.uuid4().hex[:8].upper()}"


class BookingTransaction:
    """End-to-end booking against the calendar store."""

    def __init__(
        self,
        store: CalendarStore,
        policy: BayAssignmentPolicy,
        catalog: ServiceCatalog,
        journal: CallJournal,
        tz: TimezoneLike,
        id_factory: Callable[[], str] = _new_appointment_id,
    ) -> None:
        self.store = store
        self.policy = policy
        self.catalog = catalog
        self.journal = journal
        self.tz = resolve_timezone(tz)
        self._new_id = id_factory

    def resolve_window(self, start: str, service_name: str) -> tuple[Service, Window]:
        """Parse a requested start and size it by the service duration.

        Raises:
            InvalidInputError: On an unparsable start, or an unknown
                service when the catalog is strict.
        """
        civil_start = parse_civil(start, self.tz)
        service = self.catalog.lookup(service_name)
        return service, to_window(civil_start, service)

    async def snapshot(self, window: Window, bays: Sequence[Bay]) -> list[BusyInterval]:
        """Fresh busy intervals for the window's day. Raises PersistenceError."""
        day_start, day_end = day_bounds(window.start)
        return await self.store.busy(bays, day_start, max(day_end, window.end))

    def denial_message(self, verdict: Verdict, bay: Optional[Bay] = None) -> str:
        hours = self.policy.engine.business_hours
        if verdict is Verdict.OUTSIDE_HOURS:
            return (
                f"That time is outside our operating hours "
                f"({hours.open_hour}:00 to {hours.close_hour}:00). Please suggest another time."
            )
        if verdict is Verdict.CLOSED_DAY:
            return "The shop is closed that day. Please suggest another day."
        if bay is not None:
            return f"{bay.display_name} is no longer available at that time."
        return "No bays available at this time. Please suggest another time."

    async def book(self, request: BookingRequest, bay_id: Optional[str] = None) -> BookingOutcome:
        """Book a request, optionally into a specific caller-chosen bay.

        With ``bay_id`` only that bay is re-validated; without it the full
        assignment policy picks a bay.
        """
        try:
            service, window = self.resolve_window(request.start, request.service_name)
        except InvalidInputError as exc:
            logger.warning("Booking rejected for %s: %s", request.customer_name, exc.message)
            return Denied(DenialReason.INVALID_INPUT, exc.message)

        if not request.customer_name.strip():
            return Denied(DenialReason.INVALID_INPUT, "Customer name is required.")

        requested_bay: Optional[Bay] = None
        if bay_id is not None:
            requested_bay = self.policy.get_bay(bay_id)
            if requested_bay is None:
                valid = ", ".join(b.id for b in self.policy.bays)
                return Denied(DenialReason.INVALID_INPUT, f"Invalid bay '{bay_id}'. Valid bays: {valid}.")

        candidates = (requested_bay,) if requested_bay else self.policy.bays
        try:
            known = await self.snapshot(window, candidates)
        except PersistenceError as exc:
            logger.error("Availability re-check failed for %s at %s: %s",
                         request.customer_name, window.start, exc.message)
            return Denied(DenialReason.PERSISTENCE_ERROR, "We couldn't reach the calendar. Please try again.")

        if requested_bay is not None:
            verdict = self.policy.check_bay(window, requested_bay.id, known)
            assigned = requested_bay if verdict is Verdict.AVAILABLE else None
        else:
            assigned = self.policy.assign(window, known)
            verdict = self.policy.check_bay(window, self.policy.bays[0].id, known)

        if assigned is None:
            message = self.denial_message(verdict, requested_bay)
            logger.warning("Booking denied (%s): %s requested %s for %s",
                           verdict.value, request.customer_name, window.start, service.name)
            self.journal.publish(
                f"Booking Denied: {request.customer_name} requested unavailable slot "
                f"{window.start:%Y-%m-%d %H:%M} for {service.name}.",
                {"reason": verdict.value, "phone": request.contact.phone, "email": request.contact.email},
            )
            return Denied(DenialReason.SLOT_UNAVAILABLE, message)

        appointment = Appointment(
            id=self._new_id(),
            bay_id=assigned.id,
            start=window.start,
            end=window.end,
            service_name=service.name,
            duration_hours=service.duration_hours,
            customer_name=request.customer_name.strip(),
            contact=request.contact,
            vehicle=request.vehicle,
        )
        try:
            event_id = await self.store.insert(assigned, appointment)
        except PersistenceError as exc:
            logger.error("Calendar write failed for %s in %s: %s",
                         appointment.id, assigned.id, exc.message)
            return Denied(DenialReason.PERSISTENCE_ERROR, "We couldn't save the appointment. Please try again.")

        appointment = appointment.model_copy(update={"event_id": event_id})
        vehicle = appointment.vehicle.describe()
        self.journal.publish(
            f"Booking Confirmed: {appointment.customer_name} for {service.name} on "
            f"{window.start:%Y-%m-%d %H:%M} in {assigned.display_name}"
            + (f" ({vehicle})" if vehicle else "") + ".",
            {
                "apptDate": f"{window.start:%Y-%m-%d}",
                "apptTime": f"{window.start:%H:%M}",
                "phone": appointment.contact.phone,
                "email": appointment.contact.email,
            },
        )
        logger.info("Booked %s in %s at %s", appointment.id, assigned.id, window.start)
        return Confirmed(appointment)
