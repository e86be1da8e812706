import logging
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, PositiveInt, field_validator

from ..serialization import KeyCasing
from ..storage import DEFAULT_FILENAME
from .utils import LoggingConfig

logger = logging.getLogger(__name__)

class DisplaySettings(BaseModel):
    """
    Viewport the gaze point is projected into, in screen points.
    Used when the primary monitor cannot be detected.
    """
    width_px: int = Field(390, gt=0)
    height_px: int = Field(844, gt=0)

class StoreSettings(BaseModel):
    path: Path = Field(
        default_factory=lambda: Path.home() / ".cache" / "eye-tracking" / DEFAULT_FILENAME,
        description="SQLite database holding finalized sessions."
    )
    persist_on_end: bool = Field(True, description="Write each session to the store when it ends.")

class SimulationSettings(BaseModel):
    """Settings for the simulated face tracker."""
    frequency: PositiveInt = 60
    radius: float = Field(0.15, ge=0, description="Radius of the circular look-at path, in meters.")
    speed: float = Field(0.25, description="Revolutions per second along the path.")

class TrackerSettings(BaseSettings):
    """
    Main settings, loaded from environment variables and defaults.
    """
    # Session
    app_id: str = Field("eye-tracking", min_length=1, description="Tag recorded on every session.")
    signals: list[str] = Field(
        default_factory=list,
        description="Facial signals (blend shapes) to record, e.g. eyeBlinkLeft."
    )
    max_frames_per_second: Optional[PositiveInt] = Field(
        None, description="Drop frames arriving faster than this. None keeps every frame."
    )

    # Live pointer
    smoothing_factor: float = Field(0.85, ge=0.0, le=1.0)

    # Export
    key_casing: KeyCasing = KeyCasing.AS_DECLARED

    display: DisplaySettings = Field(default_factory=DisplaySettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    simulation: SimulationSettings = Field(default_factory=SimulationSettings)

    # Logging
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="EYE_TRACKING__",
        env_file=".env",
        env_nested_delimiter='__',
        case_sensitive=False
    )

    @field_validator("signals")
    @classmethod
    def unique_signals(cls, value: list[str]) -> list[str]:
        if len(set(value)) != len(value):
            raise ValueError("Signal names must be unique.")
        return value
