"""
Google Calendar backed CalendarStore.

Each bay maps to one Google calendar. Availability uses the FreeBusy
API; listing and booking use events().list / events().insert with the
shop timezone attached. The client library is blocking, so calls run
in a worker thread under a bounded timeout, and any API, transport, or
timeout failure surfaces as PersistenceError.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Sequence

from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from httplib2 import HttpLib2Error

from bay_scheduler.schemas.booking_schema import Appointment
from bay_scheduler.schemas.shop_schema import Bay
from bay_scheduler.tools.availability import BusyInterval
from bay_scheduler.tools.errors import PersistenceError
from bay_scheduler.tools.event_codec import decode_event, encode_event
from bay_scheduler.tools.timewindow import (
    TimezoneLike,
    Window,
    absolute_to_civil,
    civil_to_absolute,
    resolve_timezone,
)

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar"]


def build_service_account_client(
    credentials_file: str = "",
    client_email: str = "",
    private_key: str = "",
    scopes: Sequence[str] = SCOPES,
    api: str = "calendar",
    version: str = "v3",
) -> Any:
    """Build a Google API client from a key file or inline key material."""
    if credentials_file:
        creds = Credentials.from_service_account_file(credentials_file, scopes=list(scopes))
    elif client_email and private_key:
        creds = Credentials.from_service_account_info(
            {
                "type": "service_account",
                "client_email": client_email,
                "private_key": private_key,
                "token_uri": "https://oauth2.googleapis.com/token",
            },
            scopes=list(scopes),
        )
    else:
        raise ValueError("Google credentials are not configured")
    return build(api, version, credentials=creds, cache_discovery=False)


def _parse_instant(raw: str) -> datetime:
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    parsed = datetime.fromisoformat(raw)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


class GoogleCalendarStore:
    """CalendarStore over the Google Calendar v3 API."""

    def __init__(self, client: Any, tz: TimezoneLike, timeout_sec: float = 10.0) -> None:
        self._client = client
        self.tz = resolve_timezone(tz)
        self.timeout_sec = timeout_sec

    async def _call(self, what: str, request_fn: Callable[[], Any]) -> Any:
        try:
            return await asyncio.wait_for(asyncio.to_thread(request_fn), self.timeout_sec)
        except asyncio.TimeoutError:
            raise PersistenceError(f"Calendar {what} timed out after {self.timeout_sec}s") from None
        except HttpError as exc:
            raise PersistenceError(f"Calendar {what} failed: {exc}") from exc
        except (OSError, HttpLib2Error, GoogleAuthError) as exc:
            raise PersistenceError(f"Calendar {what} failed: {exc}") from exc

    def _range(self, civil_min: datetime, civil_max: datetime) -> tuple[str, str]:
        return (
            civil_to_absolute(civil_min, self.tz).isoformat(),
            civil_to_absolute(civil_max, self.tz).isoformat(),
        )

    async def busy(
        self, bays: Sequence[Bay], civil_min: datetime, civil_max: datetime
    ) -> list[BusyInterval]:
        time_min, time_max = self._range(civil_min, civil_max)
        body = {
            "timeMin": time_min,
            "timeMax": time_max,
            "timeZone": self.tz.key,
            "items": [{"id": bay.calendar_id} for bay in bays],
        }
        response = await self._call(
            "free/busy query", lambda: self._client.freebusy().query(body=body).execute()
        )
        calendars = response.get("calendars", {})
        intervals: list[BusyInterval] = []
        for bay in bays:
            entry = calendars.get(bay.calendar_id, {})
            if entry.get("errors"):
                raise PersistenceError(f"Calendar for {bay.id} returned errors: {entry['errors']}")
            for block in entry.get("busy", []):
                start = absolute_to_civil(_parse_instant(block["start"]), self.tz)
                end = absolute_to_civil(_parse_instant(block["end"]), self.tz)
                if end > start:
                    intervals.append(BusyInterval(bay.id, Window(start, end)))
        return intervals

    async def list_appointments(
        self, bay: Bay, civil_min: datetime, civil_max: datetime
    ) -> list[Appointment]:
        time_min, time_max = self._range(civil_min, civil_max)
        appointments: list[Appointment] = []
        page_token = None
        while True:
            kwargs = {
                "calendarId": bay.calendar_id,
                "timeMin": time_min,
                "timeMax": time_max,
                "timeZone": self.tz.key,
                "singleEvents": True,
                "orderBy": "startTime",
            }
            if page_token:
                kwargs["pageToken"] = page_token
            response = await self._call(
                "event list", lambda: self._client.events().list(**kwargs).execute()
            )
            for event in response.get("items", []):
                if event.get("status") == "cancelled":
                    continue
                appt = decode_event(event, bay.id, self.tz)
                if appt.end > appt.start:
                    appointments.append(appt)
            page_token = response.get("nextPageToken")
            if not page_token:
                return appointments

    async def insert(self, bay: Bay, appointment: Appointment) -> str:
        body = encode_event(appointment, self.tz)
        created = await self._call(
            "event insert",
            lambda: self._client.events().insert(calendarId=bay.calendar_id, body=body).execute(),
        )
        event_id = created.get("id")
        if not event_id:
            raise PersistenceError("Calendar insert returned no event id")
        logger.info("Created event %s in %s for %s", event_id, bay.id, appointment.id)
        return event_id
