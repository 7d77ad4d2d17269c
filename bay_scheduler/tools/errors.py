"""Scheduling error types and denial reasons."""

from enum import Enum


class DenialReason(str, Enum):
    INVALID_INPUT = "invalid_input"
    SLOT_UNAVAILABLE = "slot_unavailable"
    PERSISTENCE_ERROR = "persistence_error"
    UNKNOWN_OPERATION = "unknown_operation"


class SchedulerError(Exception):
    """Base class for errors raised inside the scheduling core."""

    reason: DenialReason = DenialReason.INVALID_INPUT

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(SchedulerError):
    """Unparsable date/time, unknown bay, or a missing required field."""

    reason = DenialReason.INVALID_INPUT


class PersistenceError(SchedulerError):
    """The calendar store could not be read or written."""

    reason = DenialReason.PERSISTENCE_ERROR
