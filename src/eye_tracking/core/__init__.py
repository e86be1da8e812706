from .aggregator import SessionAggregator, new_session_id
from .device import PlatformDeviceInfo, StaticDeviceInfo
from .manager import EyeTracking
from .orientation import POINTER_ADJUSTMENTS, InterfaceOrientation, PointerAdjustment, pointer_adjustment
from .protocols import Camera, DeviceInfoProvider, FaceAnchor, FaceFrame, TrackingSubsystem
from .state import ActiveSession, RecorderState
from .transformer import FrameSample, FrameTransformer, TrackingState, classify_tracking_state

__all__ = [
    "ActiveSession",
    "Camera",
    "DeviceInfoProvider",
    "EyeTracking",
    "FaceAnchor",
    "FaceFrame",
    "FrameSample",
    "FrameTransformer",
    "InterfaceOrientation",
    "POINTER_ADJUSTMENTS",
    "PlatformDeviceInfo",
    "PointerAdjustment",
    "RecorderState",
    "SessionAggregator",
    "StaticDeviceInfo",
    "TrackingState",
    "TrackingSubsystem",
    "classify_tracking_state",
    "new_session_id",
    "pointer_adjustment",
]
