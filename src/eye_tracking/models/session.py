from types import MappingProxyType
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, WrapSerializer
from pydantic.alias_generators import to_camel


class _Record(BaseModel):
    """
    Common configuration for every persisted record.

    Fields are declared in snake_case; the exchange format uses the
    camelCase aliases. Validation accepts both spellings. Non-finite floats
    are written as the JSON constants `Infinity`/`NaN` so they read back.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        ser_json_inf_nan="constants",
    )


class ScreenSize(_Record):
    width: float
    height: float


class DeviceInfo(_Record):
    """Static snapshot of the device and environment, taken when a session starts."""
    model: str
    screen_size: ScreenSize
    system_name: str
    system_version: str


class Gaze(_Record):
    """
    One projected tracking point in screen coordinate space.

    `tracking_state` is None when tracking quality was normal.
    `orientation` is the interface orientation code at capture time.
    """
    timestamp: float
    tracking_state: Optional[str] = None
    x: float
    y: float
    orientation: int = 0


class SignalSample(_Record):
    """One named facial signal (blend shape) observation, nominally in [0, 1]."""
    timestamp: float
    tracking_state: Optional[str] = None
    signal_name: str
    value: float


# Read-only once validated; serialized as a plain object
SignalMap = Annotated[
    dict[str, tuple[SignalSample, ...]],
    AfterValidator(MappingProxyType),
    WrapSerializer(lambda value, handler: handler(dict(value))),
]


class Session(_Record):
    """
    One recording interval.

    A Session is immutable: the engine accumulates samples in an
    `ActiveSession` buffer and produces Session snapshots from it.
    """
    id: str
    app_id: str = Field(alias="appID")
    begin_time: float
    device_info: DeviceInfo
    end_time: Optional[float] = None
    scan_path: tuple[Gaze, ...] = ()
    signals: SignalMap = Field(default_factory=lambda: MappingProxyType({}))

    @property
    def is_finalized(self) -> bool:
        return self.end_time is not None
