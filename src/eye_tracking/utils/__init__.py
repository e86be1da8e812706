from .clock import ClockOffset
from .logging import ThrottledLogger, TrackingLog
from .smoothing import PointerSmoother, SmoothingFilter

__all__ = ["ClockOffset", "PointerSmoother", "SmoothingFilter", "ThrottledLogger", "TrackingLog"]
