import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from ..errors import PersistenceError
from ..export import SessionParquetWriter
from ..models import ScreenSize, Session
from ..serialization import KeyCasing, SessionCodec
from ..storage import SessionStore
from ..utils.clock import ClockOffset
from ..utils.logging import TrackingLog
from .aggregator import PointerListener, SessionAggregator
from .device import PlatformDeviceInfo
from .protocols import TrackingSubsystem
from .state import RecorderState
from .transformer import FrameTransformer

if TYPE_CHECKING:
    from ..configs import TrackerSettings

logger = logging.getLogger(__name__)


class EyeTracking:
    """
    The headless core of the recorder.

    Records sessions through a `SessionAggregator`, keeps the sessions
    completed during this runtime in memory, persists them to a
    `SessionStore` and exports/imports them through a `SessionCodec`.

    **Keep a reference to this object for as long as a session is
    recording, or the session's data is lost.**
    """

    def __init__(self, aggregator: SessionAggregator, store: Optional[SessionStore], codec: SessionCodec):
        self.aggregator = aggregator
        self.store = store
        self.codec = codec

        # Sessions completed or imported during this runtime
        self.sessions: list[Session] = []

    @classmethod
    def from_settings(cls, settings: "TrackerSettings", tracker: TrackingSubsystem) -> "EyeTracking":
        """Wires every component from configuration. The clock offset is measured here, once."""
        log = TrackingLog(settings.app_id)
        device_info = PlatformDeviceInfo(
            fallback_screen=ScreenSize(width=settings.display.width_px, height=settings.display.height_px)
        )
        store = SessionStore(settings.store.path)

        transformer = FrameTransformer(
            clock=ClockOffset.best_of(),
            viewport=device_info.screen_size(),
            signals=settings.signals,
            log=log,
        )
        aggregator = SessionAggregator(
            app_id=settings.app_id,
            tracker=tracker,
            transformer=transformer,
            device_info=device_info,
            store=store if settings.store.persist_on_end else None,
            smoothing_factor=settings.smoothing_factor,
            max_frames_per_second=settings.max_frames_per_second,
            log=log,
        )
        return cls(aggregator, store, SessionCodec(settings.key_casing))

    @property
    def state(self) -> RecorderState:
        return self.aggregator.state

    @property
    def is_recording(self) -> bool:
        return self.aggregator.is_recording

    @property
    def current_session(self) -> Optional[Session]:
        return self.aggregator.current_session

    @property
    def pointer(self) -> Optional[tuple[float, float]]:
        """Smoothed live pointer position, or None before the first gaze point."""
        return self.aggregator.pointer.position

    def set_pointer_listener(self, listener: Optional[PointerListener]) -> None:
        self.aggregator.on_pointer = listener

    # --- Session Management ---

    def start_session(self) -> Session:
        return self.aggregator.start()

    def end_session(self) -> Session:
        """
        Ends the current session. The session is kept in memory even when
        persisting it fails.
        """
        try:
            session = self.aggregator.end()
        except PersistenceError as e:
            if e.session is not None:
                self.sessions.append(e.session)
            raise

        self.sessions.append(session)
        return session

    # --- Lookup ---

    def find(self, session_id: str) -> Optional[Session]:
        """Looks in memory first, then in the store."""
        for session in self.sessions:
            if session.id == session_id:
                return session
        if self.store is not None:
            return self.store.fetch_one(session_id)
        return None

    def all_sessions(self) -> list[Session]:
        """Sessions in memory plus those in the store; memory wins on duplicate ids."""
        merged: dict[str, Session] = {}
        if self.store is not None:
            stored = self.store.fetch_all()
            if stored is None:
                logger.warning("Session store unreadable, exporting in-memory sessions only.")
            for session in stored or ():
                merged[session.id] = session
        for session in self.sessions:
            merged[session.id] = session
        return sorted(merged.values(), key=lambda s: s.begin_time)

    # --- Exporting Data ---

    def _codec_for(self, casing: Optional[KeyCasing]) -> SessionCodec:
        if casing is None or casing == self.codec.casing:
            return self.codec
        return SessionCodec(casing, indent=self.codec.indent)

    def export(self, session_id: str, casing: Optional[KeyCasing] = None) -> Optional[str]:
        """Returns the session as JSON, or None if it is unknown."""
        session = self.find(session_id)
        if session is None:
            return None
        return self._codec_for(casing).encode(session)

    def export_all(self, casing: Optional[KeyCasing] = None) -> str:
        return self._codec_for(casing).encode_many(self.all_sessions())

    def export_parquet(self, session_id: str, output_dir: Path) -> Optional[tuple[Path, Path]]:
        session = self.find(session_id)
        if session is None:
            return None
        return SessionParquetWriter(output_dir).write(session)

    # --- Importing Data ---

    def import_session(self, payload: str | bytes) -> Session:
        """
        Raises:
            SerializationError: The payload is not a valid session.
            PersistenceError: The session could not be written to the store.
        """
        session = self.codec.decode(payload)
        self._add(session)
        return session

    def import_sessions(self, payload: str | bytes) -> list[Session]:
        """
        Raises:
            SerializationError: The payload is not a valid collection of sessions.
            PersistenceError: The sessions could not be written to the store.
        """
        sessions = self.codec.decode_many(payload)
        self._add(*sessions)
        return sessions

    def _add(self, *sessions: Session) -> None:
        # Same id replaces, as the store's upsert does
        incoming = {s.id: s for s in sessions}
        self.sessions = [s for s in self.sessions if s.id not in incoming]
        self.sessions.extend(incoming.values())
        if self.store is not None:
            self.store.write_many(incoming.values())
        logger.info(f"Imported {len(sessions)} session(s).")

    def shutdown(self) -> None:
        """Ends a session still in progress and releases the store."""
        try:
            if self.is_recording:
                self.end_session()
        finally:
            if self.store is not None:
                self.store.close()
