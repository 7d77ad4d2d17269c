"""
Assembly of the scheduling core from configuration.

All shop-specific values flow from AppConfig into the engine, policy,
catalog, and transaction here; nothing below this module reads
configuration globals.
"""

import logging
import threading
from typing import Optional

from bay_scheduler.config import AppConfig
from bay_scheduler.tools.adapter import SchedulingToolAdapter
from bay_scheduler.tools.assignment import BayAssignmentPolicy
from bay_scheduler.tools.availability import AvailabilityEngine
from bay_scheduler.tools.booking import BookingTransaction
from bay_scheduler.tools.calendar_store import CalendarStore, InMemoryCalendarStore
from bay_scheduler.tools.call_log import CallJournal, CallLogSink, InMemoryCallLog
from bay_scheduler.tools.services import ServiceCatalog

logger = logging.getLogger(__name__)


def build_catalog(config: AppConfig) -> ServiceCatalog:
    return ServiceCatalog(
        default_duration_hours=config.catalog.default_duration_hours,
        strict=config.catalog.strict_service_names,
    )


def build_store(config: AppConfig) -> CalendarStore:
    tz = config.business.timezone
    if config.google.backend == "google":
        from bay_scheduler.integrations.google_calendar import (
            GoogleCalendarStore,
            build_service_account_client,
        )

        client = build_service_account_client(
            config.google.credentials_file, config.google.client_email, config.google.private_key
        )
        return GoogleCalendarStore(client, tz, timeout_sec=config.google.request_timeout_sec)
    return InMemoryCalendarStore(tz)


def build_call_log(config: AppConfig) -> CallLogSink:
    if config.google.backend == "google" and config.google.sheet_id:
        from bay_scheduler.integrations.google_calendar import build_service_account_client
        from bay_scheduler.integrations.google_sheets import SCOPES, SheetsCallLog

        client = build_service_account_client(
            config.google.credentials_file,
            config.google.client_email,
            config.google.private_key,
            scopes=SCOPES,
            api="sheets",
            version="v4",
        )
        return SheetsCallLog(
            client,
            config.google.sheet_id,
            config.business.timezone,
            sheet_range=config.google.sheet_range,
            timeout_sec=config.google.request_timeout_sec,
        )
    return InMemoryCallLog()


def build_transaction(
    config: AppConfig,
    store: Optional[CalendarStore] = None,
    sink: Optional[CallLogSink] = None,
) -> BookingTransaction:
    engine = AvailabilityEngine(config.business.business_hours())
    policy = BayAssignmentPolicy(engine, config.bays.bays())
    store = store if store is not None else build_store(config)
    journal = CallJournal(sink if sink is not None else build_call_log(config))
    logger.info("Scheduling core ready: %d bays, backend=%s",
                len(policy.bays), type(store).__name__)
    return BookingTransaction(store, policy, build_catalog(config), journal, config.business.timezone)


def build_adapter(
    config: AppConfig,
    store: Optional[CalendarStore] = None,
    sink: Optional[CallLogSink] = None,
) -> SchedulingToolAdapter:
    return SchedulingToolAdapter(build_transaction(config, store, sink))


_shared_adapter: Optional[SchedulingToolAdapter] = None
_shared_lock = threading.Lock()


def get_shared_adapter(config: AppConfig) -> SchedulingToolAdapter:
    """Process-wide adapter, built on first use.

    Every call and form request in one process must book against the same
    store and journal; an adapter per session would give the in-memory
    backend a fresh, empty calendar each time.
    """
    global _shared_adapter
    with _shared_lock:
        if _shared_adapter is None:
            _shared_adapter = build_adapter(config)
        return _shared_adapter
