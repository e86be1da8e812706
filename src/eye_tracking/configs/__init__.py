from .app import DisplaySettings, SimulationSettings, StoreSettings, TrackerSettings
from .utils import LoggingConfig

__all__ = ["DisplaySettings", "LoggingConfig", "SimulationSettings", "StoreSettings", "TrackerSettings"]
