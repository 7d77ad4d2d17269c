"""Shared test fixtures and helpers."""

from datetime import datetime
from typing import Optional

import pytest

from bay_scheduler.schemas.booking_schema import Appointment, BookingRequest, ContactInfo, Vehicle
from bay_scheduler.schemas.shop_schema import Bay, BusinessHours
from bay_scheduler.tools.adapter import SchedulingToolAdapter
from bay_scheduler.tools.assignment import BayAssignmentPolicy
from bay_scheduler.tools.availability import AvailabilityEngine
from bay_scheduler.tools.booking import BookingTransaction
from bay_scheduler.tools.calendar_store import InMemoryCalendarStore
from bay_scheduler.tools.call_log import CallJournal, InMemoryCallLog
from bay_scheduler.tools.services import ServiceCatalog

TZ = "America/New_York"

# 2024-11-25 is a Monday, 2024-11-24 a Sunday.
MONDAY = datetime(2024, 11, 25)
SUNDAY = datetime(2024, 11, 24)


@pytest.fixture
def business_hours():
    return BusinessHours(open_hour=8, close_hour=18, closed_weekdays=frozenset({6}))


@pytest.fixture
def bays():
    return (
        Bay(id="bay1", display_name="Service Bay 1", calendar_id="bay1@group.calendar.google.com"),
        Bay(id="bay2", display_name="Service Bay 2", calendar_id="bay2@group.calendar.google.com"),
    )


@pytest.fixture
def engine(business_hours):
    return AvailabilityEngine(business_hours)


@pytest.fixture
def policy(engine, bays):
    return BayAssignmentPolicy(engine, bays)


@pytest.fixture
def catalog():
    return ServiceCatalog()


@pytest.fixture
def store():
    return InMemoryCalendarStore(TZ)


@pytest.fixture
def call_log():
    return InMemoryCallLog()


@pytest.fixture
def journal(call_log):
    return CallJournal(call_log)


@pytest.fixture
def transaction(store, policy, catalog, journal):
    return BookingTransaction(store, policy, catalog, journal, TZ)


@pytest.fixture
def adapter(transaction):
    return SchedulingToolAdapter(transaction)


class FailingCallLog:
    """Sink whose every write fails."""

    def __init__(self) -> None:
        self.attempts = 0

    async def record(self, entry) -> None:
        self.attempts += 1
        raise RuntimeError("sheet unavailable")


def make_request(
    start: str = "2024-11-25T10:00:00",
    service_name: str = "Oil Change",
    customer_name: str = "Dana Reyes",
    phone: str = "2155550142",
    email: str = "",
    vehicle: Optional[Vehicle] = None,
) -> BookingRequest:
    """Helper to create a BookingRequest with sensible defaults."""
    return BookingRequest(
        start=start,
        service_name=service_name,
        customer_name=customer_name,
        contact=ContactInfo(phone=phone, email=email),
        vehicle=vehicle or Vehicle(year="2017", make="Subaru", model="Outback"),
    )


def make_appointment(
    start: datetime,
    hours: int = 1,
    bay_id: str = "bay1",
    service_name: str = "Oil Change",
    appointment_id: str = "APT-TEST0001",
) -> Appointment:
    """Helper to create an Appointment occupying ``hours`` from ``start``."""
    return Appointment(
        id=appointment_id,
        bay_id=bay_id,
        start=start,
        end=start.replace(hour=start.hour + hours),
        service_name=service_name,
        duration_hours=hours,
        customer_name="Pat Lee",
        contact=ContactInfo(phone="2155550100", email="pat@example.com"),
        vehicle=Vehicle(year="2018", make="Honda", model="Civic"),
    )
