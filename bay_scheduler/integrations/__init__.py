from bay_scheduler.integrations.google_calendar import GoogleCalendarStore, build_service_account_client
from bay_scheduler.integrations.google_sheets import SheetsCallLog

__all__ = ["GoogleCalendarStore", "SheetsCallLog", "build_service_account_client"]
