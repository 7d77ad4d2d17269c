"""Tests for import chains and module integrity.

Ensures public modules import cleanly and that re-exports from
__init__.py files work correctly.
"""

import pytest


class TestPackageReExports:
    def test_integrations_reexports(self):
        from bay_scheduler.integrations import GoogleCalendarStore, SheetsCallLog, build_service_account_client
        from bay_scheduler.integrations.google_calendar import GoogleCalendarStore as direct

        assert GoogleCalendarStore is direct
        assert SheetsCallLog is not None
        assert callable(build_service_account_client)

    def test_agents_reexport(self):
        pytest.importorskip("livekit.agents")
        from bay_scheduler.agents import SchedulerAgent
        from bay_scheduler.agents.scheduler_agent import SchedulerAgent as direct

        assert SchedulerAgent is direct


class TestModuleImports:
    def test_api_module(self):
        import bay_scheduler.api as api

        assert api.__doc__ and "booking form" in api.__doc__
        assert callable(api.create_app)

    def test_schema_modules(self):
        from bay_scheduler.schemas.booking_schema import Appointment, BookingRequest
        from bay_scheduler.schemas.session_schema import CallSession

        assert CallSession().appointment_ids == []
        assert BookingRequest is not None and Appointment is not None
