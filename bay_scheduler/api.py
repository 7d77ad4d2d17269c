"""
HTTP surface for the booking form, the staff calendar view, and the
voice runtime's tool calls. Every route delegates to the shared
SchedulingToolAdapter, so form and voice bookings see one calendar.
"""

from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bay_scheduler.app_factory import get_shared_adapter
from bay_scheduler.config import settings
from bay_scheduler.logging_context import get_session_logger, new_session_id, set_session_id
from bay_scheduler.schemas.api_schema import AvailabilityRequest, BookRequest, LogRequest, ToolCallRequest
from bay_scheduler.tools.adapter import SchedulingToolAdapter

logger = get_session_logger(__name__)


def create_app(adapter: Optional[SchedulingToolAdapter] = None) -> FastAPI:
    adapter = adapter if adapter is not None else get_shared_adapter(settings)

    app = FastAPI(
        title=f"{settings.business.name} Scheduling API",
        description="Bay availability and booking for the web form and voice assistant",
        version="1.0.0",
    )
    app.state.adapter = adapter

    @app.middleware("http")
    async def session_id_middleware(request: Request, call_next):
        session_id = request.headers.get("x-session-id")
        if session_id:
            set_session_id(session_id)
        else:
            session_id = new_session_id("WEB")
        response = await call_next(request)
        response.headers["x-session-id"] = session_id
        return response

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": str(exc) if settings.log_level.upper() == "DEBUG" else "An error occurred",
            },
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    @app.post("/api/availability")
    async def check_availability(body: AvailabilityRequest):
        """Check which bay, if any, can take a service at a start time"""
        return await adapter.check_availability(body.start, body.service_type)

    @app.post("/api/book")
    async def book(body: BookRequest):
        """Book an appointment; the form leaves the bay to the assignment policy"""
        return await adapter.book_appointment(
            bay_id=body.bay_id or "",
            date_string=body.start,
            service_type=body.service_type,
            customer_name=body.customer_name,
            customer_contact=body.customer_contact,
            customer_phone=body.customer_phone,
            customer_email=body.customer_email,
            vehicle_make=body.vehicle_make,
            vehicle_model=body.vehicle_model,
            vehicle_year=body.vehicle_year,
        )

    @app.post("/api/log")
    async def log_call(body: LogRequest):
        """Append a summary to the call log"""
        return await adapter.log_call(body.summary)

    @app.get("/api/appointments")
    async def list_appointments(
        start: datetime = Query(..., description="Range start, ISO 8601 with offset"),
        end: datetime = Query(..., description="Range end, ISO 8601 with offset"),
    ):
        """Appointments for the calendar view"""
        return await adapter.list_appointments(start, end)

    @app.post("/functions/{tool_name}")
    async def invoke_tool(tool_name: str, body: ToolCallRequest):
        """Voice runtime tool call by wire name (checkAvailability, bookAppointment, logCall)"""
        return await adapter.dispatch(tool_name, body.args)

    return app

