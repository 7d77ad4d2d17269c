"""Tests for the booking transaction: re-validate, persist, then log."""

from datetime import datetime

import pytest

from bay_scheduler.tools.availability import overlaps
from bay_scheduler.tools.booking import BookingTransaction, Confirmed, Denied
from bay_scheduler.tools.call_log import CallJournal, InMemoryCallLog
from bay_scheduler.tools.calendar_store import InMemoryCalendarStore
from bay_scheduler.tools.errors import DenialReason, PersistenceError
from tests.conftest import TZ, FailingCallLog, make_request


class FlakyStore(InMemoryCalendarStore):
    """In-memory store whose reads or writes can be made to fail."""

    def __init__(self, fail_busy: bool = False, fail_insert: bool = False) -> None:
        super().__init__(TZ)
        self.fail_busy = fail_busy
        self.fail_insert = fail_insert
        self.insert_calls = 0

    async def busy(self, bays, civil_min, civil_max):
        if self.fail_busy:
            raise PersistenceError("Calendar free/busy query timed out after 10s")
        return await super().busy(bays, civil_min, civil_max)

    async def insert(self, bay, appointment):
        self.insert_calls += 1
        if self.fail_insert:
            raise PersistenceError("Calendar event insert failed: 503")
        return await super().insert(bay, appointment)


def _transaction(store, policy, catalog, sink=None):
    return BookingTransaction(store, policy, catalog, CallJournal(sink or InMemoryCallLog()), TZ)


class TestBookConfirmed:
    @pytest.mark.asyncio
    async def test_first_booking_goes_to_bay1(self, transaction, store):
        outcome = await transaction.book(make_request())
        assert isinstance(outcome, Confirmed)
        assert outcome.appointment.bay_id == "bay1"
        assert outcome.appointment.event_id == "evt-1"
        assert outcome.appointment_id.startswith("APT-")
        assert len(store.raw_events("bay1")) == 1

    @pytest.mark.asyncio
    async def test_duration_captured_from_catalog(self, transaction):
        outcome = await transaction.book(make_request(service_name="Fault Diagnosis", start="2024-11-25T09:00"))
        assert outcome.appointment.duration_hours == 3
        assert outcome.appointment.end == datetime(2024, 11, 25, 12, 0)

    @pytest.mark.asyncio
    async def test_confirmation_logged_after_commit(self, transaction, call_log):
        await transaction.book(make_request())
        await transaction.journal.drain()
        assert len(call_log.entries) == 1
        entry = call_log.entries[0]
        assert entry.summary.startswith("Booking Confirmed: Dana Reyes for Oil Change")
        assert entry.metadata["apptDate"] == "2024-11-25"
        assert entry.metadata["apptTime"] == "10:00"
        assert entry.metadata["phone"] == "2155550142"

    @pytest.mark.asyncio
    async def test_unknown_service_books_one_hour(self, transaction):
        outcome = await transaction.book(make_request(service_name="Brake Job"))
        assert isinstance(outcome, Confirmed)
        assert outcome.appointment.duration_hours == 1

    @pytest.mark.asyncio
    async def test_no_overlaps_within_a_bay(self, transaction, store, policy):
        starts = ["2024-11-25T09:00", "2024-11-25T10:00", "2024-11-25T09:30",
                  "2024-11-25T11:00", "2024-11-25T10:30", "2024-11-25T09:00"]
        for start in starts:
            await transaction.book(make_request(start=start, service_name="Annual Inspection"))
        for bay in policy.bays:
            appts = await store.list_appointments(bay, datetime(2024, 11, 25), datetime(2024, 11, 26))
            for i, a in enumerate(appts):
                for b in appts[i + 1:]:
                    assert not overlaps(a.window, b.window)


class TestBookDenied:
    @pytest.mark.asyncio
    async def test_exhausted_after_two_bookings(self, transaction, call_log):
        first = await transaction.book(make_request())
        second = await transaction.book(make_request())
        third = await transaction.book(make_request())
        assert first.appointment.bay_id == "bay1"
        assert second.appointment.bay_id == "bay2"
        assert isinstance(third, Denied)
        assert third.reason is DenialReason.SLOT_UNAVAILABLE
        assert third.message == "No bays available at this time. Please suggest another time."
        await transaction.journal.drain()
        assert call_log.entries[0].summary.startswith("Booking Denied: Dana Reyes")

    @pytest.mark.asyncio
    async def test_sunday_denied(self, transaction):
        outcome = await transaction.book(make_request(start="2024-11-24T10:00:00"))
        assert isinstance(outcome, Denied)
        assert outcome.reason is DenialReason.SLOT_UNAVAILABLE
        assert "closed" in outcome.message

    @pytest.mark.asyncio
    async def test_past_closing_denied(self, transaction):
        outcome = await transaction.book(make_request(start="2024-11-25T16:00", service_name="Fault Diagnosis"))
        assert outcome.reason is DenialReason.SLOT_UNAVAILABLE
        assert "operating hours (8:00 to 18:00)" in outcome.message

    @pytest.mark.asyncio
    async def test_unparsable_start(self, transaction, store):
        outcome = await transaction.book(make_request(start="tomorrow at 2"))
        assert outcome.reason is DenialReason.INVALID_INPUT
        assert store.raw_events("bay1") == []

    @pytest.mark.asyncio
    async def test_missing_customer_name(self, transaction):
        outcome = await transaction.book(make_request(customer_name="  "))
        assert outcome.reason is DenialReason.INVALID_INPUT

    @pytest.mark.asyncio
    async def test_unknown_bay(self, transaction):
        outcome = await transaction.book(make_request(), bay_id="bay7")
        assert outcome.reason is DenialReason.INVALID_INPUT
        assert "bay1, bay2" in outcome.message


class TestCommittedBay:
    @pytest.mark.asyncio
    async def test_race_closed_by_revalidation(self, transaction):
        # Both sessions were offered bay1; the second must not double-book it.
        first = await transaction.book(make_request(customer_name="A"), bay_id="bay1")
        second = await transaction.book(make_request(customer_name="B"), bay_id="bay1")
        assert isinstance(first, Confirmed)
        assert isinstance(second, Denied)
        assert second.reason is DenialReason.SLOT_UNAVAILABLE
        assert second.message == "Service Bay 1 is no longer available at that time."

    @pytest.mark.asyncio
    async def test_committed_bay_not_reassigned(self, transaction):
        outcome = await transaction.book(make_request(), bay_id="bay2")
        assert outcome.appointment.bay_id == "bay2"

    @pytest.mark.asyncio
    async def test_staff_entered_event_blocks_bay(self, transaction, store):
        store.seed("bay1", {
            "summary": "Lift maintenance",
            "start": {"dateTime": "2024-11-25T09:00:00-05:00"},
            "end": {"dateTime": "2024-11-25T12:00:00-05:00"},
        })
        outcome = await transaction.book(make_request())
        assert outcome.appointment.bay_id == "bay2"

    @pytest.mark.asyncio
    async def test_cancelled_and_transparent_events_ignored(self, transaction, store):
        store.seed("bay1", {
            "status": "cancelled",
            "start": {"dateTime": "2024-11-25T10:00:00-05:00"},
            "end": {"dateTime": "2024-11-25T11:00:00-05:00"},
        })
        store.seed("bay1", {
            "transparency": "transparent",
            "start": {"dateTime": "2024-11-25T10:00:00-05:00"},
            "end": {"dateTime": "2024-11-25T11:00:00-05:00"},
        })
        outcome = await transaction.book(make_request())
        assert outcome.appointment.bay_id == "bay1"


class TestPersistenceFailures:
    @pytest.mark.asyncio
    async def test_read_failure(self, policy, catalog):
        sink = InMemoryCallLog()
        store = FlakyStore(fail_busy=True)
        outcome = await _transaction(store, policy, catalog, sink).book(make_request())
        assert outcome.reason is DenialReason.PERSISTENCE_ERROR
        assert store.insert_calls == 0

    @pytest.mark.asyncio
    async def test_write_failure_leaves_no_log_entry(self, policy, catalog):
        sink = InMemoryCallLog()
        txn = _transaction(FlakyStore(fail_insert=True), policy, catalog, sink)
        outcome = await txn.book(make_request())
        await txn.journal.drain()
        assert isinstance(outcome, Denied)
        assert outcome.reason is DenialReason.PERSISTENCE_ERROR
        assert sink.entries == []

    @pytest.mark.asyncio
    async def test_log_failure_does_not_change_outcome(self, store, policy, catalog):
        sink = FailingCallLog()
        txn = _transaction(store, policy, catalog, sink)
        outcome = await txn.book(make_request())
        await txn.journal.drain()
        assert isinstance(outcome, Confirmed)
        assert sink.attempts == 1
        assert txn.journal.failures == 1
        assert len(store.raw_events("bay1")) == 1
