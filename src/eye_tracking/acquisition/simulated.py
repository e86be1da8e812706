import asyncio
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

import numpy as np

from ..core.orientation import InterfaceOrientation
from ..core.protocols import FrameCallback
from ..core.transformer import TrackingState
from ..models import ScreenSize

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SimulatedCamera:
    """
    Pinhole camera looking down -z from the origin.

    `focal_length` is in screen points per meter at unit depth.
    """
    tracking_state: Any = TrackingState.NORMAL
    focal_length: float = 1000.0

    def project_point(
        self, point: Sequence[float], orientation: int, viewport: ScreenSize
    ) -> tuple[float, float]:
        x, y, z = point
        depth = -z if z < 0 else max(z, 1e-6)
        u = self.focal_length * x / depth
        v = self.focal_length * y / depth

        # Rotate camera axes into the interface orientation
        if orientation == InterfaceOrientation.LANDSCAPE_LEFT:
            u, v = -v, u
        elif orientation == InterfaceOrientation.LANDSCAPE_RIGHT:
            u, v = v, -u
        elif orientation == InterfaceOrientation.PORTRAIT_UPSIDE_DOWN:
            u, v = -u, -v

        return viewport.width / 2 + u, viewport.height / 2 - v


@dataclass(slots=True)
class SimulatedAnchor:
    look_at_point: tuple[float, float, float]
    transform: np.ndarray = field(default_factory=lambda: np.eye(4))
    signals: Mapping[str, float] = field(default_factory=dict)


@dataclass(slots=True)
class SimulatedFrame:
    timestamp: float
    anchors: Sequence[Any]
    camera: SimulatedCamera
    orientation: int = InterfaceOrientation.PORTRAIT


class SimulatedFaceTracker:
    """
    A tracking subsystem that simulates a face for development and testing.

    The face sits half a meter in front of the camera and looks along a
    circular path. Blink signals close both eyes briefly once per revolution.
    Frames are delivered to the registered callback either by `run` at the
    configured frequency or one at a time with `emit`.
    """

    def __init__(
        self,
        frequency: int = 60,
        radius: float = 0.15,
        speed: float = 0.25,
        distance: float = 0.5,
        supported: bool = True,
        orientation: InterfaceOrientation = InterfaceOrientation.PORTRAIT,
    ):
        """
        Args:
            frequency: The frequency in Hz to emit frames.
            radius: The radius of the circular look-at path, in meters.
            speed: Revolutions per second along the path.
            distance: Distance from the camera to the face, in meters.
            supported: What `is_supported` reports.
            orientation: Interface orientation reported with every frame.
        """
        if frequency <= 0:
            raise ValueError("Frequency must be positive.")

        self._frequency = frequency
        self._interval_s = 1.0 / frequency
        self._radius = radius
        self._speed = speed
        self._distance = distance
        self._supported = supported
        self.orientation = orientation

        self.camera = SimulatedCamera()
        self._callback: Optional[FrameCallback] = None
        self._origin = time.monotonic()
        self._frames_emitted = 0

        logger.info(f"SimulatedFaceTracker initialized to run at {self._frequency} Hz.")

    @property
    def is_running(self) -> bool:
        return self._callback is not None

    def is_supported(self) -> bool:
        return self._supported

    def start(self, callback: FrameCallback) -> None:
        self._callback = callback
        self._frames_emitted = 0
        logger.info("Simulated face tracking started.")

    def pause(self) -> None:
        self._callback = None
        logger.info(f"Simulated face tracking paused after {self._frames_emitted} frames.")

    def frame_at(self, elapsed: float) -> SimulatedFrame:
        """Builds the frame the simulation shows `elapsed` seconds after start."""
        angle = elapsed * self._speed * 2 * math.pi

        # Face placed in front of the camera; look-at point is in face space
        transform = np.eye(4)
        transform[2, 3] = -self._distance
        look_at = (self._radius * math.cos(angle), self._radius * math.sin(angle), 0.0)

        blink = 1.0 if (angle % (2 * math.pi)) < 0.2 else 0.0
        anchor = SimulatedAnchor(
            look_at_point=look_at,
            transform=transform,
            signals={"eyeBlinkLeft": blink, "eyeBlinkRight": blink},
        )
        return SimulatedFrame(
            timestamp=self._origin + elapsed,
            anchors=[anchor],
            camera=self.camera,
            orientation=self.orientation,
        )

    def emit(self, elapsed: Optional[float] = None) -> bool:
        """
        Delivers one frame to the callback, if started.

        Returns:
            True if a frame was delivered.
        """
        callback = self._callback
        if callback is None:
            return False

        if elapsed is None:
            elapsed = self._frames_emitted * self._interval_s
        callback(self.frame_at(elapsed))
        self._frames_emitted += 1
        return True

    async def run(self, duration_s: Optional[float] = None) -> None:
        """
        Emits frames at the configured frequency until paused or `duration_s`
        has elapsed.
        """
        start_time = time.monotonic()
        frame_counter = 0

        logger.info("Starting simulated frame stream...")
        try:
            while self.is_running:
                # Calculate precise timing for this frame
                target_time = start_time + (frame_counter * self._interval_s)
                if duration_s is not None and target_time - start_time >= duration_s:
                    break

                self.emit()

                # Sleep until the next frame's target time
                sleep_duration = target_time + self._interval_s - time.monotonic()
                if sleep_duration > 0:
                    await asyncio.sleep(sleep_duration)

                frame_counter += 1

        except asyncio.CancelledError:
            logger.info("Simulated tracker run task was cancelled.")
            raise
        finally:
            logger.info("Simulated frame stream has stopped.")
