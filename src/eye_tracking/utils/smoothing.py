from typing import Optional


class SmoothingFilter:
    """
    Exponential low pass filter for a single scalar signal.

    The filter is seeded with the first sample it sees, so the first
    `update` returns that sample unchanged instead of easing in from zero.
    """
    __slots__ = ("factor", "_value")

    def __init__(self, factor: float):
        """
        Args:
            factor: Range 0.0 - 1.0. Weight kept from the previous value;
                    higher is smoother.
        """
        if not 0.0 <= factor <= 1.0:
            raise ValueError("Smoothing factor must be within [0, 1].")
        self.factor = factor
        self._value: Optional[float] = None

    @property
    def value(self) -> Optional[float]:
        return self._value

    def update(self, sample: float) -> float:
        if self._value is None:
            self._value = sample
        else:
            self._value = self.factor * self._value + (1.0 - self.factor) * sample
        return self._value

    def reset(self) -> None:
        self._value = None


class PointerSmoother:
    """Smooths a 2D pointer position with one filter per axis."""

    def __init__(self, factor: float = 0.85):
        self._x = SmoothingFilter(factor)
        self._y = SmoothingFilter(factor)

    @property
    def position(self) -> Optional[tuple[float, float]]:
        if self._x.value is None or self._y.value is None:
            return None
        return self._x.value, self._y.value

    def update(self, x: float, y: float) -> tuple[float, float]:
        return self._x.update(x), self._y.update(y)

    def reset(self) -> None:
        self._x.reset()
        self._y.reset()
