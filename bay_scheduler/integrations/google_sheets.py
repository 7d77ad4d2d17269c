"""Google Sheets call-log sink.

Appends one row per log entry with the columns staff already use:
Date, Time, Summary, Appt Date, Appt Time, Phone, Email.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from bay_scheduler.schemas.booking_schema import LogEntry
from bay_scheduler.tools.timewindow import TimezoneLike, absolute_to_civil, resolve_timezone

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


class SheetsCallLog:
    """CallLogSink that appends rows to a spreadsheet range."""

    def __init__(
        self,
        client: Any,
        spreadsheet_id: str,
        tz: TimezoneLike,
        sheet_range: str = "Sheet1!A:G",
        timeout_sec: float = 10.0,
    ) -> None:
        self._client = client
        self.spreadsheet_id = spreadsheet_id
        self.sheet_range = sheet_range
        self.tz = resolve_timezone(tz)
        self.timeout_sec = timeout_sec

    def row_for(self, entry: LogEntry) -> list[str]:
        logged_at = absolute_to_civil(entry.timestamp, self.tz)
        meta = entry.metadata
        return [
            f"{logged_at:%Y-%m-%d}",
            f"{logged_at:%H:%M:%S}",
            entry.summary,
            meta.get("apptDate", ""),
            meta.get("apptTime", ""),
            meta.get("phone", ""),
            meta.get("email", ""),
        ]

    async def record(self, entry: LogEntry) -> None:
        body = {"values": [self.row_for(entry)]}
        request = self._client.spreadsheets().values().append(
            spreadsheetId=self.spreadsheet_id,
            range=self.sheet_range,
            valueInputOption="USER_ENTERED",
            body=body,
        )
        await asyncio.wait_for(asyncio.to_thread(request.execute), self.timeout_sec)
        logger.debug("Appended log row %s", entry.id)
