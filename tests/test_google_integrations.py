"""Tests for the Google Calendar store and Sheets call log against fake clients."""

from datetime import datetime, timezone

import pytest
from google.auth.exceptions import RefreshError
from httplib2 import ServerNotFoundError

from bay_scheduler.app_factory import build_adapter
from bay_scheduler.config import AppConfig
from bay_scheduler.integrations.google_calendar import GoogleCalendarStore
from bay_scheduler.integrations.google_sheets import SheetsCallLog
from bay_scheduler.schemas.booking_schema import LogEntry
from bay_scheduler.tools.call_log import InMemoryCallLog
from bay_scheduler.tools.errors import PersistenceError
from tests.conftest import MONDAY, TZ, make_appointment


class _Request:
    def __init__(self, result):
        self._result = result

    def execute(self):
        if isinstance(self._result, Exception):
            raise self._result
        return self._result


class FakeCalendarClient:
    """Records calls shaped like googleapiclient's calendar v3 resource."""

    def __init__(self, freebusy=None, pages=None, inserted=None):
        self.freebusy_response = freebusy or {}
        self.pages = list(pages or [{"items": []}])
        self.inserted = inserted if inserted is not None else {"id": "gcal-1"}
        self.calls: list[tuple[str, dict]] = []

    def freebusy(self):
        return self

    def events(self):
        return self

    def query(self, body):
        self.calls.append(("query", body))
        return _Request(self.freebusy_response)

    def list(self, **kwargs):
        self.calls.append(("list", kwargs))
        return _Request(self.pages.pop(0))

    def insert(self, calendarId, body):
        self.calls.append(("insert", {"calendarId": calendarId, "body": body}))
        return _Request(self.inserted)


class TestGoogleCalendarStore:
    @pytest.mark.asyncio
    async def test_busy_converts_to_civil(self, bays):
        client = FakeCalendarClient(freebusy={"calendars": {
            bays[0].calendar_id: {"busy": [{"start": "2024-11-25T15:00:00Z", "end": "2024-11-25T16:00:00Z"}]},
            bays[1].calendar_id: {"busy": []},
        }})
        store = GoogleCalendarStore(client, TZ)
        busy = await store.busy(bays, MONDAY, MONDAY.replace(day=26))
        assert len(busy) == 1
        assert busy[0].bay_id == "bay1"
        assert busy[0].window.start == datetime(2024, 11, 25, 10, 0)

        _, body = client.calls[0]
        assert body["timeMin"] == "2024-11-25T00:00:00-05:00"
        assert body["timeZone"] == TZ
        assert body["items"] == [{"id": b.calendar_id} for b in bays]

    @pytest.mark.asyncio
    async def test_calendar_errors_raise_persistence_error(self, bays):
        client = FakeCalendarClient(freebusy={"calendars": {
            bays[0].calendar_id: {"errors": [{"reason": "notFound"}]},
        }})
        with pytest.raises(PersistenceError):
            await GoogleCalendarStore(client, TZ).busy(bays, MONDAY, MONDAY.replace(day=26))

    @pytest.mark.asyncio
    async def test_transport_failure_raises_persistence_error(self, bays):
        client = FakeCalendarClient(freebusy=ConnectionResetError("reset by peer"))
        with pytest.raises(PersistenceError, match="free/busy query failed"):
            await GoogleCalendarStore(client, TZ).busy(bays, MONDAY, MONDAY.replace(day=26))

    @pytest.mark.asyncio
    async def test_unreachable_server_raises_persistence_error(self, bays):
        client = FakeCalendarClient(freebusy=ServerNotFoundError("Unable to find the server at www.googleapis.com"))
        with pytest.raises(PersistenceError, match="Unable to find the server"):
            await GoogleCalendarStore(client, TZ).busy(bays, MONDAY, MONDAY.replace(day=26))

    @pytest.mark.asyncio
    async def test_expired_credentials_raise_persistence_error(self, bays):
        client = FakeCalendarClient(inserted=RefreshError("invalid_grant: Token has been expired or revoked."))
        with pytest.raises(PersistenceError, match="event insert failed"):
            await GoogleCalendarStore(client, TZ).insert(bays[0], make_appointment(MONDAY.replace(hour=10)))

    @pytest.mark.asyncio
    async def test_list_follows_pages(self, bays):
        legacy = {
            "id": "e1",
            "summary": "Oil Change - Sam",
            "start": {"dateTime": "2024-11-25T09:00:00-05:00"},
            "end": {"dateTime": "2024-11-25T10:00:00-05:00"},
        }
        cancelled = {**legacy, "id": "e2", "status": "cancelled"}
        later = {**legacy, "id": "e3",
                 "start": {"dateTime": "2024-11-25T13:00:00-05:00"},
                 "end": {"dateTime": "2024-11-25T14:00:00-05:00"}}
        client = FakeCalendarClient(pages=[
            {"items": [legacy, cancelled], "nextPageToken": "p2"},
            {"items": [later]},
        ])
        appts = await GoogleCalendarStore(client, TZ).list_appointments(bays[0], MONDAY, MONDAY.replace(day=26))
        assert [a.id for a in appts] == ["e1", "e3"]
        assert client.calls[1][1]["pageToken"] == "p2"
        assert client.calls[0][1]["singleEvents"] is True

    @pytest.mark.asyncio
    async def test_insert_writes_encoded_event(self, bays):
        client = FakeCalendarClient()
        appt = make_appointment(MONDAY.replace(hour=10))
        event_id = await GoogleCalendarStore(client, TZ).insert(bays[1], appt)
        assert event_id == "gcal-1"
        _, call = client.calls[0]
        assert call["calendarId"] == bays[1].calendar_id
        assert call["body"]["summary"] == "Oil Change - Pat Lee"

    @pytest.mark.asyncio
    async def test_insert_without_id_fails(self, bays):
        client = FakeCalendarClient(inserted={})
        with pytest.raises(PersistenceError):
            await GoogleCalendarStore(client, TZ).insert(bays[0], make_appointment(MONDAY.replace(hour=10)))


class FakeSheetsClient:
    def __init__(self):
        self.appended: list[dict] = []

    def spreadsheets(self):
        return self

    def values(self):
        return self

    def append(self, **kwargs):
        self.appended.append(kwargs)
        return _Request({})


class TestSheetsCallLog:
    @pytest.mark.asyncio
    async def test_appends_row_in_shop_time(self):
        client = FakeSheetsClient()
        sink = SheetsCallLog(client, "sheet-123", TZ)
        entry = LogEntry(
            id="LOG-1",
            timestamp=datetime(2024, 11, 25, 15, 30, tzinfo=timezone.utc),
            summary="Booking Confirmed: Dana",
            metadata={"apptDate": "2024-11-26", "apptTime": "09:00", "phone": "2155550142"},
        )
        await sink.record(entry)
        call = client.appended[0]
        assert call["spreadsheetId"] == "sheet-123"
        assert call["range"] == "Sheet1!A:G"
        assert call["valueInputOption"] == "USER_ENTERED"
        assert call["body"]["values"] == [[
            "2024-11-25", "10:30:00", "Booking Confirmed: Dana", "2024-11-26", "09:00", "2155550142", "",
        ]]


class TestBookingOverGoogleStore:
    @pytest.mark.asyncio
    async def test_unreachable_calendar_fails_booking_cleanly(self):
        client = FakeCalendarClient(freebusy=ServerNotFoundError("Unable to find the server at www.googleapis.com"))
        sink = InMemoryCallLog()
        adapter = build_adapter(AppConfig(), store=GoogleCalendarStore(client, TZ), sink=sink)
        result = await adapter.book_appointment(
            bay_id="bay1",
            date_string="2024-11-25T10:00:00",
            service_type="Oil Change",
            customer_name="Dana Reyes",
            customer_contact="2155550142",
        )
        await adapter.transaction.journal.drain()
        assert result["status"] == "failed"
        assert result["reason"] == "persistence_error"
        assert sink.entries == []

    @pytest.mark.asyncio
    async def test_write_failure_after_free_slot(self):
        client = FakeCalendarClient(
            freebusy={"calendars": {}},
            inserted=ServerNotFoundError("Unable to find the server at www.googleapis.com"),
        )
        adapter = build_adapter(AppConfig(), store=GoogleCalendarStore(client, TZ), sink=InMemoryCallLog())
        result = await adapter.book_appointment(
            bay_id="",
            date_string="2024-11-25T10:00:00",
            service_type="Oil Change",
            customer_name="Dana Reyes",
            customer_email="dana@example.com",
        )
        assert result == {
            "status": "failed",
            "message": "We couldn't save the appointment. Please try again.",
            "reason": "persistence_error",
        }
