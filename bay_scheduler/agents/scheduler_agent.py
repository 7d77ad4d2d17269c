"""
Scheduler agent: the voice receptionist's tool surface.

Each function tool is a thin call into SchedulingToolAdapter. The
adapter already converts every failure into a result dict, which is
rendered back to the model as compact JSON.
"""

from __future__ import annotations

import json
from typing import Optional

from livekit.agents import Agent, RunContext, function_tool

from bay_scheduler.logging_context import get_session_logger
from bay_scheduler.schemas.session_schema import CallSession
from bay_scheduler.tools.adapter import SchedulingToolAdapter

logger = get_session_logger(__name__)


class SchedulerAgent(Agent):
    """Checks availability, books bays, and logs the call."""

    def __init__(self, adapter: SchedulingToolAdapter, instructions: str) -> None:
        super().__init__(instructions=instructions)
        self._adapter = adapter

    @function_tool()
    async def check_availability(
        self, context: RunContext[CallSession], date_string: str, service_type: str
    ) -> str:
        """Check whether a service bay is free.

        date_string is a local ISO 8601 date-time such as 2024-11-25T14:00:00.
        service_type is the exact service name.
        """
        result = await self._adapter.check_availability(date_string, service_type)
        if result.get("available"):
            context.userdata.offered_bay_id = result.get("bayId")
            context.userdata.offered_start = date_string
        return json.dumps(result)

    @function_tool()
    async def book_appointment(
        self,
        context: RunContext[CallSession],
        bay_id: str,
        date_string: str,
        service_type: str,
        customer_name: str,
        customer_contact: str,
        vehicle_make: Optional[str] = None,
        vehicle_model: Optional[str] = None,
        vehicle_year: Optional[str] = None,
    ) -> str:
        """Book an appointment in the bay returned by check_availability.

        customer_contact is a phone number or email address.
        """
        result = await self._adapter.book_appointment(
            bay_id=bay_id,
            date_string=date_string,
            service_type=service_type,
            customer_name=customer_name,
            customer_contact=customer_contact,
            vehicle_make=vehicle_make,
            vehicle_model=vehicle_model,
            vehicle_year=vehicle_year,
        )
        if result.get("status") == "confirmed":
            context.userdata.appointment_ids.append(result["appointmentId"])
            logger.info("Voice booking confirmed: %s", result["appointmentId"])
        return json.dumps(result)

    @function_tool()
    async def log_call(self, context: RunContext[CallSession], summary: str) -> str:
        """Record a short summary of the call. Call once, at the end."""
        context.userdata.logged = True
        return json.dumps(await self._adapter.log_call(summary))
