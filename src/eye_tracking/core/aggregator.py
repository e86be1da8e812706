import logging
import time
import uuid
from typing import TYPE_CHECKING, Callable, Optional

from ..errors import (
    HardwareUnsupported,
    NoActiveSession,
    PersistenceError,
    SessionAlreadyActive,
)
from ..models import Session
from ..utils.logging import TrackingLog
from ..utils.smoothing import PointerSmoother
from .orientation import pointer_adjustment
from .protocols import DeviceInfoProvider, FaceFrame, TrackingSubsystem
from .state import ActiveSession, Idle, RecorderState, Recording
from .transformer import FrameSample, FrameTransformer

if TYPE_CHECKING:
    from ..storage import SessionStore

logger = logging.getLogger(__name__)

PointerListener = Callable[[float, float], None]


def new_session_id() -> str:
    return str(uuid.uuid4()).upper()


class SessionAggregator:
    """
    Owns the lifecycle of the current session.

    IDLE --start()--> RECORDING --end()--> IDLE

    The active session buffer lives inside the `Recording` state, so there is
    no session reference to go stale once the state returns to `Idle`.
    Frames are expected one at a time from the tracking subsystem's delivery
    context.
    """

    def __init__(
        self,
        app_id: str,
        tracker: TrackingSubsystem,
        transformer: FrameTransformer,
        device_info: DeviceInfoProvider,
        store: Optional["SessionStore"] = None,
        smoothing_factor: float = 0.85,
        max_frames_per_second: Optional[int] = None,
        clock: Callable[[], float] = time.time,
        id_factory: Callable[[], str] = new_session_id,
        log: Optional[TrackingLog] = None,
    ):
        if max_frames_per_second is not None and max_frames_per_second <= 0:
            raise ValueError("max_frames_per_second must be positive.")

        self.app_id = app_id
        self.tracker = tracker
        self.transformer = transformer
        self.device_info = device_info
        self.store = store
        self.log = log or TrackingLog(app_id)

        self._clock = clock
        self._id_factory = id_factory
        self._min_frame_interval = 1.0 / max_frames_per_second if max_frames_per_second else 0.0
        self._last_frame_time: Optional[float] = None

        self._state: Idle | Recording = Idle()
        self.pointer = PointerSmoother(smoothing_factor)
        self.on_pointer: Optional[PointerListener] = None

    @property
    def state(self) -> RecorderState:
        return self._state.kind

    @property
    def is_recording(self) -> bool:
        return isinstance(self._state, Recording)

    @property
    def current_session(self) -> Optional[Session]:
        """Snapshot of the session being recorded, or None when idle."""
        if isinstance(self._state, Recording):
            return self._state.session.snapshot()
        return None

    # --- Lifecycle ---

    def start(self) -> Session:
        """
        Starts a new session and arms the tracking subsystem.

        Raises:
            HardwareUnsupported: Face tracking is unavailable.
            SessionAlreadyActive: A session is already recording.
        """
        if not self.tracker.is_supported():
            raise HardwareUnsupported()
        if isinstance(self._state, Recording):
            raise SessionAlreadyActive(self._state.session.id)

        session = ActiveSession(
            id=self._id_factory(),
            app_id=self.app_id,
            begin_time=self._clock(),
            device_info=self.device_info.snapshot(),
        )
        self._state = Recording(session)
        self._last_frame_time = None
        self.pointer.reset()

        try:
            self.tracker.start(self.handle_frame)
        except Exception:
            self._state = Idle()
            raise

        self.log.general.info(f"Session {session.id} started.")
        return session.snapshot()

    def end(self) -> Session:
        """
        Finalizes the current session and writes it to the store.

        The aggregator is idle when this returns or raises.

        Raises:
            NoActiveSession: Nothing is recording.
            PersistenceError: The store write failed. `error.session` holds
                the finalized session.
        """
        if not isinstance(self._state, Recording):
            raise NoActiveSession()

        active = self._state.session
        self.tracker.pause()
        self._state = Idle()

        session = active.finalize(end_time=self._clock())
        self.log.general.info(
            f"Session {session.id} ended with {len(session.scan_path)} gaze points "
            f"and {len(session.signals)} signals."
        )

        if self.store is not None:
            try:
                self.store.write_one(session)
            except PersistenceError as e:
                self.log.general.error(f"Session {session.id} could not be persisted: {e.cause}")
                e.session = session
                raise

        return session

    # --- Frame delivery ---

    def handle_frame(self, frame: FaceFrame) -> None:
        """
        Tracking callback: transforms a raw frame and records it.

        Raises:
            UnclassifiedTrackingState: The frame reports an unknown tracking state.
        """
        if not isinstance(self._state, Recording):
            # Late delivery after end()
            logger.debug("Frame delivered while idle, ignoring.")
            return

        if self._min_frame_interval and self._last_frame_time is not None:
            if frame.timestamp - self._last_frame_time < self._min_frame_interval:
                return

        sample = self.transformer.transform(frame)
        if sample is None:
            return

        self._last_frame_time = frame.timestamp
        self.on_update(sample)

    def on_update(self, sample: FrameSample) -> None:
        """Appends a transformed sample to the current session. No-op when idle."""
        if not isinstance(self._state, Recording):
            return

        session = self._state.session
        session.append_gaze(sample.gaze)
        for signal in sample.signals:
            session.append_signal(signal)

        self._update_pointer(sample)

    def _update_pointer(self, sample: FrameSample) -> None:
        gaze = sample.gaze
        target = pointer_adjustment(gaze.orientation).apply(gaze.x, gaze.y, self.transformer.viewport)
        x, y = self.pointer.update(*target)

        if self.on_pointer is not None:
            self.on_pointer(x, y)
