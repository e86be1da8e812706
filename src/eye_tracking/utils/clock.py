import time
from typing import Callable


class ClockOffset:
    """
    Maps monotonic frame timestamps onto wall-clock (Unix) time.

    Frame timestamps count from an arbitrary boot-relative origin. The offset
    is measured once and reused for the life of the engine.
    """
    __slots__ = ("latency", "offset")

    def __init__(self, offset: float, latency: float = 0.0):
        self.offset = offset
        self.latency = latency

    @classmethod
    def measure(
        cls,
        wall: Callable[[], float] = time.time,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> "ClockOffset":
        before = monotonic()
        utc = wall()
        after = monotonic()

        # Assume the wall clock was read halfway between the monotonic reads
        monotonic_at_utc = (before + after) / 2

        return cls(offset=utc - monotonic_at_utc, latency=after - before)

    @classmethod
    def best_of(
        cls,
        samples: int = 5,
        wall: Callable[[], float] = time.time,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> "ClockOffset":
        """Takes several measurements and keeps the one with the tightest bracket."""
        if samples <= 0:
            raise ValueError("samples must be positive.")
        return min(cls.measure(wall, monotonic) for _ in range(samples))

    def to_wall(self, monotonic_timestamp: float) -> float:
        return self.offset + monotonic_timestamp

    # Sort by latency, lower is better
    def __lt__(self, other: "ClockOffset") -> bool:
        return self.latency < other.latency

    def __repr__(self) -> str:
        return f"ClockOffset(offset={self.offset:.6f}, latency={self.latency:.6f})"
