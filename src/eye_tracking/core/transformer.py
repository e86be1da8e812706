import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

import numpy as np

from ..errors import UnclassifiedTrackingState
from ..models import Gaze, ScreenSize, SignalSample
from ..utils.clock import ClockOffset
from ..utils.logging import ThrottledLogger, TrackingLog
from .protocols import FaceAnchor, FaceFrame

logger = logging.getLogger(__name__)


class TrackingState(str, Enum):
    """Raw tracking quality reported by the camera for a frame."""
    NORMAL = "normal"
    NOT_AVAILABLE = "notAvailable"
    LIMITED_EXCESSIVE_MOTION = "limited.excessiveMotion"
    LIMITED_INITIALIZING = "limited.initializing"
    LIMITED_INSUFFICIENT_FEATURES = "limited.insufficientFeatures"
    LIMITED_RELOCALIZING = "limited.relocalizing"


# Recorded classification per state. Normal tracking is recorded as no classification.
TRACKING_LABELS: Mapping[TrackingState, Optional[str]] = MappingProxyType({
    TrackingState.NORMAL: None,
    TrackingState.NOT_AVAILABLE: "notAvailable",
    TrackingState.LIMITED_EXCESSIVE_MOTION: "limited.excessiveMotion",
    TrackingState.LIMITED_INITIALIZING: "limited.initializing",
    TrackingState.LIMITED_INSUFFICIENT_FEATURES: "limited.insufficientFeatures",
    TrackingState.LIMITED_RELOCALIZING: "limited.relocalizing",
})


def classify_tracking_state(raw: Any) -> Optional[str]:
    """
    Returns the recorded classification for a raw tracking state.

    Raises:
        UnclassifiedTrackingState: `raw` is not one of the known states.
    """
    try:
        state = TrackingState(raw)
    except ValueError:
        raise UnclassifiedTrackingState(raw) from None
    return TRACKING_LABELS[state]


@dataclass(slots=True, frozen=True)
class FrameSample:
    """Everything one tracking frame contributes to a session."""
    gaze: Gaze
    signals: tuple[SignalSample, ...] = ()


class FrameTransformer:
    """
    Turns raw tracking frames into screen-space gaze points and signal samples.

    Frames are processed one at a time on the delivery context; instances
    are not thread-safe.
    """

    def __init__(
        self,
        clock: ClockOffset,
        viewport: ScreenSize,
        signals: Iterable[str] = (),
        log: Optional[TrackingLog] = None,
    ):
        """
        Args:
            clock: Offset from the tracker's monotonic clock to wall-clock time.
            viewport: Screen size the gaze point is projected into.
            signals: Names of the facial signals to extract from each frame.
            log: Logger categories. Defaults to categories under this module.
        """
        self.clock = clock
        self.viewport = viewport
        self.signals: tuple[str, ...] = tuple(dict.fromkeys(signals))
        self.log = log or TrackingLog(__name__)
        self._degraded_logger = ThrottledLogger(self.log.tracking_state, interval_sec=1)

    def transform(self, frame: FaceFrame) -> Optional[FrameSample]:
        """
        Returns the sample for this frame, or None when no face is tracked.

        Raises:
            UnclassifiedTrackingState: The frame reports an unknown tracking state.
        """
        anchor = frame.anchors[0] if frame.anchors else None
        if not isinstance(anchor, FaceAnchor):
            return None

        tracking_state = classify_tracking_state(frame.camera.tracking_state)
        if tracking_state is not None:
            self._degraded_logger.warning("Degraded tracking: %s", tracking_state)

        timestamp = self.clock.to_wall(frame.timestamp)
        x, y = self.project(anchor, frame)

        gaze = Gaze(
            timestamp=timestamp,
            tracking_state=tracking_state,
            x=x,
            y=y,
            orientation=int(frame.orientation),
        )
        self.log.gaze.debug("%.3f, %.3f", x, y)

        return FrameSample(gaze=gaze, signals=tuple(self._extract_signals(anchor, timestamp, tracking_state)))

    def project(self, anchor: FaceAnchor, frame: FaceFrame) -> tuple[float, float]:
        """Projects the anchor's look-at point into screen coordinates."""
        # Face space -> world space
        look_at = np.append(np.asarray(anchor.look_at_point, dtype=np.float64)[:3], 1.0)
        world = np.asarray(anchor.transform, dtype=np.float64).reshape(4, 4) @ look_at

        x, y = frame.camera.project_point(tuple(world[:3]), frame.orientation, self.viewport)
        return float(x), float(y)

    def _extract_signals(self, anchor: FaceAnchor, timestamp: float, tracking_state: Optional[str]):
        for name in self.signals:
            value = anchor.signals.get(name)
            # Missing means "not reported this frame", which is not the same as 0.0
            if value is None:
                continue

            self.log.signal(name).debug("%s: %s", name, value)
            yield SignalSample(
                timestamp=timestamp,
                tracking_state=tracking_state,
                signal_name=name,
                value=float(value),
            )
