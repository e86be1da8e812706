from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional

from ..models import DeviceInfo, Gaze, Session, SignalSample


class RecorderState(Enum):
    """
    Operational states of the session aggregator.
    """
    IDLE = auto() # Ready to start a session.
    RECORDING = auto() # A session is active and accepting samples.


@dataclass(slots=True)
class ActiveSession:
    """
    Mutable buffer for the session being recorded.

    Only ever appended to. Immutable `Session` values are produced with
    `snapshot` and `finalize`.
    """
    id: str
    app_id: str
    begin_time: float
    device_info: DeviceInfo
    scan_path: list[Gaze] = field(default_factory=list)
    signals: dict[str, list[SignalSample]] = field(default_factory=dict)

    def append_gaze(self, gaze: Gaze) -> None:
        self.scan_path.append(gaze)

    def append_signal(self, sample: SignalSample) -> None:
        self.signals.setdefault(sample.signal_name, []).append(sample)

    def snapshot(self, end_time: Optional[float] = None) -> Session:
        return Session(
            id=self.id,
            app_id=self.app_id,
            begin_time=self.begin_time,
            device_info=self.device_info,
            end_time=end_time,
            scan_path=tuple(self.scan_path),
            signals={name: tuple(samples) for name, samples in self.signals.items()},
        )

    def finalize(self, end_time: float) -> Session:
        return self.snapshot(end_time=end_time)


@dataclass(slots=True, frozen=True)
class Idle:
    kind = RecorderState.IDLE


@dataclass(slots=True, frozen=True)
class Recording:
    session: ActiveSession
    kind = RecorderState.RECORDING
