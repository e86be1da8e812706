from .core import EyeTracking, RecorderState, SessionAggregator
from .errors import (
    EyeTrackingError,
    HardwareUnsupported,
    NoActiveSession,
    PersistenceError,
    PersistenceErrorKind,
    SerializationError,
    SessionAlreadyActive,
    UnclassifiedTrackingState,
)
from .models import DeviceInfo, Gaze, ScreenSize, Session, SignalSample
from .serialization import KeyCasing, SessionCodec
from .storage import SessionStore

__all__ = [
    "DeviceInfo",
    "EyeTracking",
    "EyeTrackingError",
    "Gaze",
    "HardwareUnsupported",
    "KeyCasing",
    "NoActiveSession",
    "PersistenceError",
    "PersistenceErrorKind",
    "RecorderState",
    "ScreenSize",
    "SerializationError",
    "Session",
    "SessionAggregator",
    "SessionAlreadyActive",
    "SessionCodec",
    "SessionStore",
    "SignalSample",
    "UnclassifiedTrackingState",
]
