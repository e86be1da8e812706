"""Tests for the monotonic to wall-clock offset."""
from __future__ import annotations

import itertools

import pytest

from eye_tracking.utils import ClockOffset


class TestClockOffset:

    def test_measure_uses_midpoint_of_monotonic_reads(self):
        monotonic = iter([100.0, 100.2])
        offset = ClockOffset.measure(wall=lambda: 1_700_000_000.0, monotonic=lambda: next(monotonic))
        assert offset.offset == pytest.approx(1_700_000_000.0 - 100.1)
        assert offset.latency == pytest.approx(0.2)

    def test_to_wall(self):
        offset = ClockOffset(offset=1_000.0)
        assert offset.to_wall(5.5) == 1_005.5

    def test_offset_is_not_recomputed(self):
        """Converting later frames reuses the measured offset."""
        wall = itertools.count(1_700_000_000.0, 10.0)
        offset = ClockOffset.measure(wall=lambda: next(wall), monotonic=lambda: 50.0)
        first = offset.to_wall(60.0)
        assert offset.to_wall(60.0) == first
        assert offset.to_wall(61.0) - first == pytest.approx(1.0)

    def test_best_of_keeps_lowest_latency(self):
        # Latencies: 0.5, 0.1, 0.3
        reads = iter([0.0, 0.5, 1.0, 1.1, 2.0, 2.3])
        offset = ClockOffset.best_of(samples=3, wall=lambda: 10.0, monotonic=lambda: next(reads))
        assert offset.latency == pytest.approx(0.1)
        assert offset.offset == pytest.approx(10.0 - 1.05)

    def test_best_of_requires_samples(self):
        with pytest.raises(ValueError):
            ClockOffset.best_of(samples=0)
