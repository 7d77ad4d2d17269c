"""
Append-only call and booking log.

Booking outcomes are published to the journal after the calendar write
has committed. Delivery to the sink runs as a background task: a slow or
failing sink is reported through the logger and the ``failures``
counter, and never changes the booking result the caller receives.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

from bay_scheduler.schemas.booking_schema import LogEntry

logger = logging.getLogger(__name__)


class CallLogSink(Protocol):
    async def record(self, entry: LogEntry) -> None: ...


class InMemoryCallLog:
    """Newest-first list of entries, mirroring the staff log panel."""

    def __init__(self) -> None:
        self.entries: list[LogEntry] = []

    async def record(self, entry: LogEntry) -> None:
        self.entries.insert(0, entry)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CallJournal:
    """Fire-and-forget publisher in front of a CallLogSink."""

    def __init__(
        self, sink: CallLogSink, clock: Callable[[], datetime] = _utc_now
    ) -> None:
        self.sink = sink
        self._clock = clock
        self._pending: set[asyncio.Task] = set()
        self.failures = 0

    def publish(self, summary: str, metadata: Optional[dict[str, str]] = None) -> LogEntry:
        """Schedule delivery of a new entry and return it immediately.

        Must be called from inside a running event loop.
        """
        entry = LogEntry(
            id=f"LOG-{uuid.uuid4().hex[:8]}",
            timestamp=self._clock(),
            summary=summary,
            metadata=metadata or {},
        )
        task = asyncio.get_running_loop().create_task(self._deliver(entry))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return entry

    async def _deliver(self, entry: LogEntry) -> None:
        try:
            await self.sink.record(entry)
        except Exception:
            self.failures += 1
            logger.warning("Call log delivery failed for %s: %r", entry.id, entry.summary, exc_info=True)

    async def drain(self) -> None:
        """Wait for every scheduled delivery to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))
