"""Shared pytest fixtures."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

import numpy as np
import pytest

from eye_tracking.core import FrameTransformer, SessionAggregator, StaticDeviceInfo
from eye_tracking.models import DeviceInfo, Gaze, ScreenSize, Session, SignalSample
from eye_tracking.storage import SessionStore
from eye_tracking.utils import ClockOffset

VIEWPORT = ScreenSize(width=400.0, height=800.0)


@dataclass
class FakeCamera:
    """Projects a world point straight onto its x/y components."""
    tracking_state: Any = "normal"
    calls: list = field(default_factory=list)

    def project_point(self, point, orientation, viewport):
        self.calls.append((tuple(point), orientation, viewport))
        return point[0], point[1]


@dataclass
class FakeAnchor:
    look_at_point: tuple[float, float, float]
    transform: Any = field(default_factory=lambda: np.eye(4))
    signals: dict = field(default_factory=dict)


@dataclass
class FakeFrame:
    timestamp: float
    anchors: list
    camera: FakeCamera = field(default_factory=FakeCamera)
    orientation: int = 1


def make_frame(
    timestamp: float,
    x: float = 0.0,
    y: float = 0.0,
    tracking_state: Any = "normal",
    signals: Optional[dict] = None,
    orientation: int = 1,
) -> FakeFrame:
    anchor = FakeAnchor(look_at_point=(x, y, -1.0), signals=signals or {})
    return FakeFrame(
        timestamp=timestamp,
        anchors=[anchor],
        camera=FakeCamera(tracking_state=tracking_state),
        orientation=orientation,
    )


class FakeTracker:
    """Tracking subsystem double that records calls and lets tests push frames."""

    def __init__(self, supported: bool = True):
        self.supported = supported
        self.callback: Optional[Callable] = None
        self.start_calls = 0
        self.pause_calls = 0

    def is_supported(self) -> bool:
        return self.supported

    def start(self, callback) -> None:
        self.start_calls += 1
        self.callback = callback

    def pause(self) -> None:
        self.pause_calls += 1
        self.callback = None

    def deliver(self, frame) -> None:
        assert self.callback is not None, "tracker not started"
        self.callback(frame)


class StepClock:
    """Wall clock that advances by a fixed step every time it is read."""

    def __init__(self, start: float = 1_600_000_000.0, step: float = 1.0):
        self.now = start
        self.step = step

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        return value


@pytest.fixture
def device_info() -> DeviceInfo:
    return DeviceInfo(
        model="iPhone13,2",
        screen_size=ScreenSize(width=390.0, height=844.0),
        system_name="iOS",
        system_version="17.1",
    )


@pytest.fixture
def tracker() -> FakeTracker:
    return FakeTracker()


@pytest.fixture
def transformer() -> FrameTransformer:
    return FrameTransformer(
        clock=ClockOffset(offset=1_000.0),
        viewport=VIEWPORT,
        signals=["eyeBlinkLeft", "jawOpen"],
    )


@pytest.fixture
def aggregator(tracker, transformer, device_info) -> SessionAggregator:
    ids = iter(["abc", "def", "ghi"])
    return SessionAggregator(
        app_id="com.example.reader",
        tracker=tracker,
        transformer=transformer,
        device_info=StaticDeviceInfo(device_info),
        clock=StepClock(),
        id_factory=lambda: next(ids),
    )


@pytest.fixture
def store(tmp_path: Path) -> SessionStore:
    s = SessionStore(tmp_path / "eyeTracking.sqlite")
    yield s
    s.close()


@pytest.fixture
def sample_session(device_info) -> Session:
    return Session(
        id="8F3C2A50-0B1E-4F7A-9B7D-2C1D5E6F7A8B",
        app_id="com.example.reader",
        begin_time=1_600_000_000.25,
        device_info=device_info,
        end_time=1_600_000_030.5,
        scan_path=(
            Gaze(timestamp=1_600_000_000.3, x=10.0, y=20.0, orientation=1),
            Gaze(timestamp=1_600_000_000.4, tracking_state="limited.initializing", x=11.5, y=21.0, orientation=1),
        ),
        signals={
            "eyeBlinkLeft": (
                SignalSample(timestamp=1_600_000_000.3, signal_name="eyeBlinkLeft", value=0.1),
                SignalSample(
                    timestamp=1_600_000_000.4,
                    tracking_state="limited.initializing",
                    signal_name="eyeBlinkLeft",
                    value=0.9,
                ),
            ),
        },
    )
