"""Exceptions raised by the eye tracking engine, store and codec."""
from enum import Enum
from typing import Any, Optional


class EyeTrackingError(Exception):
    """Base exception for the eye tracking package."""
    pass


class HardwareUnsupported(EyeTrackingError):
    """Raised when the face tracking capability is unavailable on this device."""

    def __init__(self, message: str = "Face tracking is not supported on this device."):
        super().__init__(message)


class SessionAlreadyActive(EyeTrackingError):
    """Raised when a session is started while another one is recording."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session '{session_id}' already in progress. End it before starting another.")


class NoActiveSession(EyeTrackingError):
    """Raised when a session is ended while nothing is recording."""

    def __init__(self):
        super().__init__("No session in progress.")


class PersistenceErrorKind(str, Enum):
    READ = "read"
    WRITE = "write"
    SCHEMA = "schema"


class PersistenceError(EyeTrackingError):
    """
    Raised when the session store fails.

    `session` carries the finalized session when the failure happened while
    persisting it, so the caller still holds the data.
    """

    def __init__(self, kind: PersistenceErrorKind, cause: BaseException, session: Optional[Any] = None):
        self.kind = kind
        self.cause = cause
        self.session = session
        super().__init__(f"Session store {kind.value} failed: {cause}")


class SerializationError(EyeTrackingError):
    """Raised when a payload cannot be decoded into sessions."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"Invalid session payload: {cause}")


class UnclassifiedTrackingState(EyeTrackingError):
    """Raised for a raw tracking state outside the known classification."""

    def __init__(self, raw: Any):
        self.raw = raw
        super().__init__(f"Unrecognized tracking state: {raw!r}")
