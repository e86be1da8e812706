from typing import Any, Callable, Mapping, Protocol, Sequence, runtime_checkable

from ..models import DeviceInfo, ScreenSize


@runtime_checkable
class Camera(Protocol):
    """
    Camera of one tracking frame.

    `tracking_state` is the raw tracking quality reported for the frame.
    Projection is orientation-aware and owned by the tracking subsystem.
    """
    tracking_state: Any

    def project_point(
        self, point: Sequence[float], orientation: int, viewport: ScreenSize
    ) -> tuple[float, float]: ...


@runtime_checkable
class FaceAnchor(Protocol):
    """A tracked face: its 4x4 world transform, look-at point and named signal values."""
    transform: Any
    look_at_point: Sequence[float]
    signals: Mapping[str, float]


@runtime_checkable
class FaceFrame(Protocol):
    """One update delivered by the tracking subsystem. `timestamp` is monotonic seconds."""
    timestamp: float
    orientation: int
    anchors: Sequence[Any]
    camera: Camera


FrameCallback = Callable[[FaceFrame], None]


@runtime_checkable
class TrackingSubsystem(Protocol):
    """Push-based face tracking, delivering one frame at a time to a single callback."""
    def is_supported(self) -> bool: ...

    def start(self, callback: FrameCallback) -> None: ...

    def pause(self) -> None: ...


@runtime_checkable
class DeviceInfoProvider(Protocol):
    def snapshot(self) -> DeviceInfo: ...
