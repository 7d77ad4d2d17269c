"""Session correlation ID logging context.

Each booking form submission and each voice call runs under its own
session ID, so a single customer's check -> book -> log sequence can be
followed through the logs even when sessions race against each other.

Usage:
    from bay_scheduler.logging_context import get_session_logger, set_session_id

    set_session_id("CALL-abc123")
    logger = get_session_logger(__name__)
    logger.info("Checking availability")  # -> [CALL-abc123] Checking availability
"""

import logging
import uuid
from contextvars import ContextVar

_session_id: ContextVar[str] = ContextVar("session_id", default="-")


def set_session_id(session_id: str) -> None:
    """Set the correlation ID for the current async context."""
    _session_id.set(session_id)


def get_session_id() -> str:
    """Retrieve the current correlation ID."""
    return _session_id.get()


def new_session_id(prefix: str = "SES") -> str:
    """Generate and activate a fresh correlation ID."""
    session_id = f"{prefix}-{uuid.uuid4().hex[:8]}"
    set_session_id(session_id)
    return session_id


class SessionIdFilter(logging.Filter):
    """Injects session_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = _session_id.get()  # type: ignore[attr-defined]
        return True


def install_session_filter() -> None:
    """Attach the filter to every root handler.

    Handler-level filters see records from all loggers, so formatters
    may use ``%(session_id)s`` unconditionally.
    """
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, SessionIdFilter) for f in handler.filters):
            handler.addFilter(SessionIdFilter())


def get_session_logger(name: str) -> logging.Logger:
    """Return a logger with the SessionIdFilter attached."""
    logger = logging.getLogger(name)
    if not any(isinstance(f, SessionIdFilter) for f in logger.filters):
        logger.addFilter(SessionIdFilter())
    return logger
