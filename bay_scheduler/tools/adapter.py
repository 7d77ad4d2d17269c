"""
Conversational tool adapter.

Binds the tool names the voice runtime invokes (``checkAvailability``,
``bookAppointment``, ``logCall``) plus the calendar view's
``listAppointments`` to the scheduling core. Every call returns a plain
dict envelope: the voice runtime can only forward a structured result
back into the conversation, so no exception escapes this boundary.
"""

from __future__ import annotations

import functools
import inspect
import re
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional, Union

from bay_scheduler.logging_context import get_session_logger
from bay_scheduler.schemas.booking_schema import (
    AppointmentView,
    AvailabilityResponse,
    BookingRequest,
    BookingResponse,
    ErrorResponse,
    LogCallResponse,
    Vehicle,
)
from bay_scheduler.tools.booking import BookingTransaction, Confirmed
from bay_scheduler.tools.errors import DenialReason, InvalidInputError, SchedulerError
from bay_scheduler.tools.timewindow import parse_civil
from bay_scheduler.utils import build_contact

logger = get_session_logger(__name__)

ToolResult = dict[str, Any]

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def _to_snake(name: str) -> str:
    return _CAMEL_RE.sub("_", name).lower()


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def tool_boundary(func: Callable[..., Awaitable[ToolResult]]) -> Callable[..., Awaitable[ToolResult]]:
    """Convert any failure inside a tool into an ``{"error": ...}`` envelope."""

    @functools.wraps(func)
    async def wrapper(self: "SchedulingToolAdapter", *args: Any, **kwargs: Any) -> ToolResult:
        try:
            return await func(self, *args, **kwargs)
        except SchedulerError as exc:
            logger.warning("Tool %s rejected: %s", func.__name__, exc.message)
            return ErrorResponse(error=exc.message, reason=exc.reason.value).to_wire()
        except Exception as exc:
            logger.exception("Tool %s failed", func.__name__)
            return ErrorResponse(error=f"Tool execution failed: {exc}").to_wire()

    return wrapper


class SchedulingToolAdapter:
    """Tool-call facade over a BookingTransaction."""

    def __init__(self, transaction: BookingTransaction) -> None:
        self.transaction = transaction
        self._handlers: dict[str, Callable[..., Awaitable[ToolResult]]] = {
            "checkAvailability": self.check_availability,
            "bookAppointment": self.book_appointment,
            "logCall": self.log_call,
            "listAppointments": self.list_appointments,
        }

    @property
    def tool_names(self) -> list[str]:
        return list(self._handlers)

    # ------------------------------------------------------------------ #
    # Tools
    # ------------------------------------------------------------------ #

    @tool_boundary
    async def check_availability(self, date_string: str, service_type: str) -> ToolResult:
        """Report the first free bay for a start time and service. Read-only."""
        txn = self.transaction
        _, window = txn.resolve_window(date_string, service_type)
        known = await txn.snapshot(window, txn.policy.bays)
        bay = txn.policy.assign(window, known)
        if bay is not None:
            logger.info("Availability %s for %s: %s", window.start, service_type, bay.id)
            return AvailabilityResponse(
                available=True, bay_id=bay.id, message=f"{bay.display_name} is available."
            ).to_wire()
        verdict = txn.policy.check_bay(window, txn.policy.bays[0].id, known)
        logger.info("Availability %s for %s: none (%s)", window.start, service_type, verdict.value)
        return AvailabilityResponse(available=False, message=txn.denial_message(verdict)).to_wire()

    @tool_boundary
    async def book_appointment(
        self,
        bay_id: str,
        date_string: str,
        service_type: str,
        customer_name: str,
        customer_contact: str = "",
        customer_phone: str = "",
        customer_email: str = "",
        vehicle_make: Optional[str] = None,
        vehicle_model: Optional[str] = None,
        vehicle_year: Optional[Union[str, int]] = None,
    ) -> ToolResult:
        """Book into the bay the caller committed to, re-validating that bay.

        An empty ``bay_id`` lets the assignment policy choose, which is
        how the web form books.
        """
        contact = build_contact(customer_contact, phone=customer_phone, email=customer_email)
        if not (contact.phone or contact.email):
            raise InvalidInputError("A phone number or email address is required.")
        request = BookingRequest(
            start=date_string,
            service_name=service_type,
            customer_name=customer_name or "",
            contact=contact,
            vehicle=Vehicle(
                year=_optional_text(vehicle_year),
                make=_optional_text(vehicle_make),
                model=_optional_text(vehicle_model),
            ),
        )
        outcome = await self.transaction.book(request, bay_id=bay_id or None)
        if isinstance(outcome, Confirmed):
            appt = outcome.appointment
            return BookingResponse(
                status="confirmed",
                appointment_id=appt.id,
                bay_id=appt.bay_id,
                message=f"{appt.service_name} booked for {appt.start:%A %B %d at %I:%M %p}.",
            ).to_wire()
        return BookingResponse(
            status="failed", message=outcome.message, reason=outcome.reason.value
        ).to_wire()

    @tool_boundary
    async def log_call(self, summary: str) -> ToolResult:
        """Append a call summary to the log. Always reports logged."""
        self.transaction.journal.publish(summary or "")
        return LogCallResponse().to_wire()

    @tool_boundary
    async def list_appointments(
        self, time_min: Union[str, datetime], time_max: Union[str, datetime]
    ) -> ToolResult:
        """Appointments in a time range, ordered by start then bay priority."""
        txn = self.transaction
        civil_min = self._to_civil(time_min)
        civil_max = self._to_civil(time_max)
        if civil_max <= civil_min:
            raise InvalidInputError("time_max must be after time_min.")

        views: list[AppointmentView] = []
        for bay in txn.policy.bays:
            for appt in await txn.store.list_appointments(bay, civil_min, civil_max):
                views.append(AppointmentView(
                    id=appt.id,
                    bay_id=bay.id,
                    bay_name=bay.display_name,
                    start=appt.start,
                    end=appt.end,
                    service_type=appt.service_name,
                    customer_name=appt.customer_name,
                    vehicle=appt.vehicle.describe(),
                ))
        priority = {bay.id: i for i, bay in enumerate(txn.policy.bays)}
        views.sort(key=lambda v: (v.start, priority[v.bay_id]))
        return {"appointments": [v.to_wire() for v in views]}

    def _to_civil(self, value: Union[str, datetime]) -> datetime:
        if isinstance(value, datetime):
            return parse_civil(value.isoformat(), self.transaction.tz)
        return parse_civil(value, self.transaction.tz)

    # ------------------------------------------------------------------ #
    # Dispatch
    # ------------------------------------------------------------------ #

    async def dispatch(self, name: str, args: Optional[dict[str, Any]] = None) -> ToolResult:
        """Invoke a tool by its wire name with camelCase arguments."""
        handler = self._handlers.get(name)
        if handler is None:
            logger.warning("Unknown tool requested: %s", name)
            return ErrorResponse(
                error=f"Unknown function: {name}", reason=DenialReason.UNKNOWN_OPERATION.value
            ).to_wire()

        params = inspect.signature(handler).parameters
        kwargs: dict[str, Any] = {}
        for key, value in (args or {}).items():
            snake = _to_snake(key)
            if snake in params:
                kwargs[snake] = value
            else:
                logger.debug("Ignoring unexpected argument %s for %s", key, name)

        missing = [
            p.name for p in params.values()
            if p.default is inspect.Parameter.empty and p.name not in kwargs
        ]
        if missing:
            return ErrorResponse(
                error=f"Missing required arguments for {name}: {', '.join(missing)}",
                reason=DenialReason.INVALID_INPUT.value,
            ).to_wire()
        return await handler(**kwargs)

    async def handle_tool_calls(self, calls: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Run a batch of tool calls one after another, in order."""
        responses = []
        for call in calls:
            result = await self.dispatch(call.get("name", ""), call.get("args"))
            responses.append({
                "id": call.get("id"),
                "name": call.get("name"),
                "response": {"result": result},
            })
        return responses
