"""
Offline console demo: replays voice tool calls against an in-memory calendar.

Uses the real availability engine, bay assignment, booking transaction,
and tool adapter. No LLM, no LiveKit, no Google APIs.

Usage:
    python console_demo.py
    python console_demo.py --scenario sunday
    python console_demo.py --scenario race
"""

import argparse
import asyncio
import json
from typing import Any

from bay_scheduler.app_factory import build_adapter
from bay_scheduler.config import settings
from bay_scheduler.logging_context import new_session_id
from bay_scheduler.tools.calendar_store import InMemoryCalendarStore
from bay_scheduler.tools.call_log import InMemoryCallLog

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

_CUSTOMER = {
    "customerName": "Dana Reyes",
    "customerContact": "215-555-0142",
    "vehicleYear": "2017",
    "vehicleMake": "Subaru",
    "vehicleModel": "Outback",
}

# Each step is a tool name and its args; "{bay}" is filled with the bay
# the previous checkAvailability offered.
SCENARIOS: dict[str, list[tuple[str, dict[str, Any]]]] = {
    "fill": [
        ("checkAvailability", {"dateString": "2024-11-25T10:00:00", "serviceType": "Oil Change"}),
        ("bookAppointment", {"bayId": "{bay}", "dateString": "2024-11-25T10:00:00",
                             "serviceType": "Oil Change", **_CUSTOMER}),
        ("checkAvailability", {"dateString": "2024-11-25T10:00:00", "serviceType": "Oil Change"}),
        ("bookAppointment", {"bayId": "{bay}", "dateString": "2024-11-25T10:00:00",
                             "serviceType": "Oil Change", **_CUSTOMER}),
        ("checkAvailability", {"dateString": "2024-11-25T10:00:00", "serviceType": "Oil Change"}),
        ("logCall", {"summary": "Booked two oil changes on Nov 25; third request declined."}),
    ],
    "sunday": [
        ("checkAvailability", {"dateString": "2024-11-24T10:00:00", "serviceType": "Tire Service"}),
        ("checkAvailability", {"dateString": "2024-11-25T16:00:00", "serviceType": "Fault Diagnosis"}),
        ("checkAvailability", {"dateString": "next tuesday", "serviceType": "Tire Service"}),
    ],
    "race": [
        ("checkAvailability", {"dateString": "2024-11-26T09:00:00", "serviceType": "Annual Inspection"}),
        ("_webForm", {"start": "2024-11-26T09:00:00", "serviceType": "Annual Inspection"}),
        ("bookAppointment", {"bayId": "{bay}", "dateString": "2024-11-26T09:00:00",
                             "serviceType": "Annual Inspection", **_CUSTOMER}),
    ],
}


async def _play(scenario: str) -> None:
    store = InMemoryCalendarStore(settings.business.timezone)
    call_log = InMemoryCallLog()
    adapter = build_adapter(settings, store=store, sink=call_log)
    new_session_id("DEMO")

    print(f"\n{BOLD}{'=' * 60}{RESET}")
    print(f"{BOLD}  BAY SCHEDULER - Scenario: {scenario}{RESET}")
    print(f"{BOLD}  Business: {settings.business.name}{RESET}")
    print(f"{BOLD}{'=' * 60}{RESET}")

    offered_bay = ""
    for name, args in SCENARIOS[scenario]:
        if name == "_webForm":
            print(f"\n{YELLOW}[Web form] books {args['start']} first{RESET}")
            result = await adapter.book_appointment(
                bay_id=offered_bay,
                date_string=args["start"],
                service_type=args["serviceType"],
                customer_name="Walk-in Customer",
                customer_contact="walkin@example.com",
            )
        else:
            args = {k: (offered_bay if v == "{bay}" else v) for k, v in args.items()}
            print(f"\n{BLUE}[Tool] {name}{RESET} {DIM}{json.dumps(args)}{RESET}")
            result = await adapter.dispatch(name, args)
            if name == "checkAvailability" and result.get("available"):
                offered_bay = result["bayId"]
        print(f"{GREEN}  -> {json.dumps(result)}{RESET}")

    await adapter.transaction.journal.drain()
    print(f"\n{BOLD}Call log:{RESET}")
    for entry in reversed(call_log.entries):
        print(f"{DIM}  {entry.timestamp:%H:%M:%S}  {entry.summary}{RESET}")


def run_demo(scenario: str = "fill") -> None:
    asyncio.run(_play(scenario))


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline bay scheduler demo")
    parser.add_argument("--scenario", choices=sorted(SCENARIOS), default="fill")
    args = parser.parse_args()
    run_demo(args.scenario)


if __name__ == "__main__":
    main()
