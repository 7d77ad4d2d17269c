"""Per-call session state for the voice agent."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class CallSession:
    """
    Structured data kept on ``session.userdata`` for one voice call.

    Availability results are advisory only; the booking step always
    re-reads the calendar before writing.
    """
    call_id: str = ""
    offered_bay_id: Optional[str] = None
    offered_start: Optional[str] = None
    appointment_ids: list[str] = field(default_factory=list)
    logged: bool = False
