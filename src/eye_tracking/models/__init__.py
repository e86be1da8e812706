from .session import DeviceInfo, Gaze, ScreenSize, Session, SignalSample

__all__ = ["DeviceInfo", "Gaze", "ScreenSize", "Session", "SignalSample"]
