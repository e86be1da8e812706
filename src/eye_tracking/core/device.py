import logging
import platform
from typing import Optional

from screeninfo import ScreenInfoError, get_monitors

from ..models import DeviceInfo, ScreenSize

logger = logging.getLogger(__name__)


class PlatformDeviceInfo:
    """
    Snapshots the host platform and its primary display.

    Falls back to the configured screen size when no monitor can be
    enumerated (headless hosts, CI).
    """

    def __init__(self, fallback_screen: ScreenSize, model: Optional[str] = None):
        self._fallback_screen = fallback_screen
        self._model = model

    def screen_size(self) -> ScreenSize:
        try:
            monitors = get_monitors()
        except ScreenInfoError as e:
            logger.warning(f"Monitor discovery failed, using configured size: {e}")
            return self._fallback_screen

        if not monitors:
            return self._fallback_screen

        primary = next((m for m in monitors if m.is_primary), monitors[0])
        return ScreenSize(width=primary.width, height=primary.height)

    def snapshot(self) -> DeviceInfo:
        return DeviceInfo(
            model=self._model or platform.machine() or "unknown",
            screen_size=self.screen_size(),
            system_name=platform.system() or "unknown",
            system_version=platform.release() or "unknown",
        )


class StaticDeviceInfo:
    """Returns the same snapshot every time. For simulations and tests."""

    def __init__(self, info: DeviceInfo):
        self._info = info

    def snapshot(self) -> DeviceInfo:
        return self._info
