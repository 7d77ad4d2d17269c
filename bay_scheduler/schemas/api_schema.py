"""HTTP request bodies for the booking form and voice tool endpoints."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AvailabilityRequest(_CamelModel):
    start: str
    service_type: str


class BookRequest(_CamelModel):
    """Booking form submission. ``bay_id`` is omitted by the form."""

    start: str
    service_type: str
    customer_name: str
    bay_id: Optional[str] = None
    customer_contact: str = ""
    customer_phone: str = ""
    customer_email: str = ""
    vehicle_make: Optional[str] = None
    vehicle_model: Optional[str] = None
    vehicle_year: Optional[str] = None


class LogRequest(_CamelModel):
    summary: str = ""


class ToolCallRequest(_CamelModel):
    """A single voice-runtime tool invocation."""

    args: dict[str, Any] = Field(default_factory=dict)
