"""
Appointment <-> calendar event encoding.

Events written by this service carry the booking twice: as the
human-readable summary/description convention staff already read
("<Service> - <Customer>" plus labeled ``Phone:``, ``Email:`` and
``Vehicle:`` lines), and as structured private extended properties
tagged with a schema version. Decoding prefers the structured copy and
falls back to the labeled lines for events created before it existed
or entered by hand.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time
from typing import Any, Optional

from bay_scheduler.schemas.booking_schema import Appointment, ContactInfo, Vehicle
from bay_scheduler.tools.timewindow import (
    TimezoneLike,
    absolute_to_civil,
    resolve_timezone,
    window_to_absolute,
)

SCHEMA_VERSION = "2"

_LABEL_RE = re.compile(r"^\s*(Phone|Email|Vehicle)\s*:\s*(.*?)\s*$", re.IGNORECASE | re.MULTILINE)
_YEAR_RE = re.compile(r"^(19|20)\d{2}$")
_EMPTY_MARKERS = {"", "undefined", "null", "none", "n/a"}


def _clean(value: Optional[str]) -> str:
    if value is None or value.strip().lower() in _EMPTY_MARKERS:
        return ""
    return value.strip()


def format_summary(service_name: str, customer_name: str) -> str:
    return f"{service_name} - {customer_name}"


def format_description(contact: ContactInfo, vehicle: Vehicle) -> str:
    return "\n".join([
        f"Phone: {contact.phone}",
        f"Email: {contact.email}",
        f"Vehicle: {vehicle.describe()}",
    ])


def parse_vehicle_text(text: str) -> Vehicle:
    """Best-effort split of a free-text vehicle into year/make/model.

    A leading four-digit year is taken as the year, the next word as the
    make, and the remainder as the model. Without a year the first word
    is the make.

    Examples:
        >>> parse_vehicle_text("2018 Honda Civic Si").model
        'Civic Si'
        >>> parse_vehicle_text("Ford").make
        'Ford'
    """
    tokens = _clean(text).split()
    if not tokens:
        return Vehicle()
    year = None
    if _YEAR_RE.match(tokens[0]):
        year = tokens.pop(0)
    make = tokens.pop(0) if tokens else None
    model = " ".join(tokens) or None
    return Vehicle(year=year, make=make, model=model)


def parse_description(description: str) -> tuple[ContactInfo, Vehicle]:
    """Recover contact and vehicle details from the labeled-line format."""
    fields: dict[str, str] = {}
    for label, value in _LABEL_RE.findall(description or ""):
        fields.setdefault(label.lower(), _clean(value))
    contact = ContactInfo(phone=fields.get("phone", ""), email=fields.get("email", ""))
    return contact, parse_vehicle_text(fields.get("vehicle", ""))


def encode_event(appointment: Appointment, tz: TimezoneLike) -> dict[str, Any]:
    """Build a Google Calendar event body for an appointment."""
    zone = resolve_timezone(tz)
    start, end = window_to_absolute(appointment.window, zone)
    vehicle = appointment.vehicle
    return {
        "summary": format_summary(appointment.service_name, appointment.customer_name),
        "description": format_description(appointment.contact, vehicle),
        "start": {"dateTime": start.isoformat(), "timeZone": zone.key},
        "end": {"dateTime": end.isoformat(), "timeZone": zone.key},
        "extendedProperties": {
            "private": {
                "schema": SCHEMA_VERSION,
                "appointmentId": appointment.id,
                "bayId": appointment.bay_id,
                "serviceName": appointment.service_name,
                "durationHours": str(appointment.duration_hours),
                "customerName": appointment.customer_name,
                "phone": appointment.contact.phone,
                "email": appointment.contact.email,
                "vehicleYear": vehicle.year or "",
                "vehicleMake": vehicle.make or "",
                "vehicleModel": vehicle.model or "",
            }
        },
    }


def _parse_event_time(value: dict[str, Any], tz: TimezoneLike) -> datetime:
    if "dateTime" in value:
        raw = value["dateTime"]
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        parsed = datetime.fromisoformat(raw)
        if parsed.tzinfo is None:
            return parsed
        return absolute_to_civil(parsed, tz)
    # All-day event: occupies the whole civil day.
    return datetime.combine(date.fromisoformat(value["date"]), time.min)


def event_window(event: dict[str, Any], tz: TimezoneLike) -> tuple[datetime, datetime]:
    """Civil ``(start, end)`` of a raw calendar event."""
    return _parse_event_time(event["start"], tz), _parse_event_time(event["end"], tz)


def decode_event(event: dict[str, Any], bay_id: str, tz: TimezoneLike) -> Appointment:
    """Rebuild an Appointment from a stored calendar event."""
    start, end = event_window(event, tz)
    props = event.get("extendedProperties", {}).get("private", {})

    if props.get("schema") == SCHEMA_VERSION:
        return Appointment(
            id=props.get("appointmentId") or event.get("id", ""),
            bay_id=props.get("bayId") or bay_id,
            start=start,
            end=end,
            service_name=props.get("serviceName", ""),
            duration_hours=int(props.get("durationHours") or 1),
            customer_name=props.get("customerName", ""),
            contact=ContactInfo(phone=props.get("phone", ""), email=props.get("email", "")),
            vehicle=Vehicle(
                year=props.get("vehicleYear") or None,
                make=props.get("vehicleMake") or None,
                model=props.get("vehicleModel") or None,
            ),
            event_id=event.get("id"),
        )

    summary = event.get("summary", "")
    service_name, _, customer_name = summary.partition(" - ")
    contact, vehicle = parse_description(event.get("description", ""))
    hours = round((end - start).total_seconds() / 3600)
    return Appointment(
        id=event.get("id", ""),
        bay_id=bay_id,
        start=start,
        end=end,
        service_name=service_name.strip(),
        duration_hours=max(1, hours),
        customer_name=customer_name.strip(),
        contact=contact,
        vehicle=vehicle,
        event_id=event.get("id"),
    )
