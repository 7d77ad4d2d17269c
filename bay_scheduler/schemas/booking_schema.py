"""Booking, appointment, and tool-response data models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from bay_scheduler.tools.timewindow import Window


class ContactInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    phone: str = ""
    email: str = ""


class Vehicle(BaseModel):
    model_config = ConfigDict(frozen=True)

    year: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None

    def describe(self) -> str:
        """Human-readable "year make model", skipping unknown parts."""
        return " ".join(p for p in (self.year, self.make, self.model) if p)


class BookingRequest(BaseModel):
    """A request to book, as produced by the web form or a voice tool call."""

    start: str
    service_name: str
    customer_name: str
    contact: ContactInfo = Field(default_factory=ContactInfo)
    vehicle: Vehicle = Field(default_factory=Vehicle)


class Appointment(BaseModel):
    """A persisted booking. Service duration is captured by value."""

    model_config = ConfigDict(frozen=True)

    id: str
    bay_id: str
    start: datetime
    end: datetime
    service_name: str
    duration_hours: int
    customer_name: str
    contact: ContactInfo = Field(default_factory=ContactInfo)
    vehicle: Vehicle = Field(default_factory=Vehicle)
    event_id: Optional[str] = None

    @property
    def window(self) -> Window:
        return Window(self.start, self.end)


class LogEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: datetime
    summary: str
    metadata: dict[str, str] = Field(default_factory=dict)


class _Envelope(BaseModel):
    """Tool responses use camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class AvailabilityResponse(_Envelope):
    available: bool
    bay_id: Optional[str] = None
    message: str = ""


class BookingResponse(_Envelope):
    status: str
    appointment_id: Optional[str] = None
    bay_id: Optional[str] = None
    message: Optional[str] = None
    reason: Optional[str] = None


class LogCallResponse(_Envelope):
    status: str = "logged"


class ErrorResponse(_Envelope):
    error: str
    reason: Optional[str] = None


class AppointmentView(_Envelope):
    """Calendar-grid projection of an appointment."""

    id: str
    bay_id: str
    bay_name: str
    start: datetime
    end: datetime
    service_type: str
    customer_name: str
    vehicle: str = ""
