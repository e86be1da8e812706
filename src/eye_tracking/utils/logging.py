import time
import logging


class ThrottledLogger:
    def __init__(self, logger: logging.Logger, interval_sec: float = 5.0) -> None:
        self._logger = logger
        self._interval = interval_sec
        self._last_log_time: float | None = None
        self._counter = 0

    def warning(self, message: str, *args, **kwargs):
        self._counter += 1
        now = time.monotonic()

        if self._last_log_time is None or now - self._last_log_time >= self._interval:
            self._logger.warning("[%d] " + message, self._counter, *args, **kwargs)
            self._last_log_time = now
            self._counter = 0


class TrackingLog:
    """
    Logger categories for one application.

    Every category is a child of a logger named after the app id, so an
    application can route or silence the eye tracking output as a whole.
    """

    def __init__(self, app_id: str) -> None:
        self.app_id = app_id
        self._root = logging.getLogger(app_id)

    @property
    def general(self) -> logging.Logger:
        return self._root.getChild("general")

    @property
    def gaze(self) -> logging.Logger:
        return self._root.getChild("gaze")

    @property
    def tracking_state(self) -> logging.Logger:
        return self._root.getChild("trackingState")

    def signal(self, name: str) -> logging.Logger:
        """Returns a logger whose category is the given signal name."""
        return self._root.getChild("signal").getChild(name)
