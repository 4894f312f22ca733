"""
Unit tests for the clock abstractions.
"""

import threading
from datetime import datetime, timedelta, timezone

from inventory_kernel.domain.clock import (
    DeterministicClock,
    MonotonicClock,
    SystemClock,
)


class TestDeterministicClock:

    def test_fixed_until_advanced(self):
        clock = DeterministicClock()
        assert clock.now() == clock.now()
        assert clock.now() == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_tick(self):
        clock = DeterministicClock()
        before = clock.now()
        assert clock.tick() == before + timedelta(seconds=1)

    def test_set_time_resets_advance(self):
        clock = DeterministicClock()
        clock.advance(30)
        target = datetime(2025, 6, 1, tzinfo=timezone.utc)
        clock.set_time(target)
        assert clock.now() == target


class TestSystemClock:

    def test_timezone_aware(self):
        assert SystemClock().now().tzinfo is not None


class TestMonotonicClock:

    def test_strictly_increasing_over_frozen_source(self):
        clock = MonotonicClock(DeterministicClock())
        readings = [clock.now() for _ in range(5)]
        assert all(a < b for a, b in zip(readings, readings[1:]))
        assert readings[1] - readings[0] == timedelta(microseconds=1)

    def test_follows_source_when_ahead(self):
        source = DeterministicClock()
        clock = MonotonicClock(source)
        clock.now()
        source.advance(60)
        assert clock.now() == source.now()

    def test_never_goes_backwards(self):
        source = DeterministicClock()
        clock = MonotonicClock(source)
        first = clock.now()
        source.set_time(datetime(2020, 1, 1, tzinfo=timezone.utc))
        assert clock.now() > first

    def test_readings_are_utc(self):
        assert MonotonicClock(DeterministicClock()).now().utcoffset() == timedelta(0)

    def test_unique_across_threads(self):
        clock = MonotonicClock(DeterministicClock())
        readings: list[datetime] = []
        lock = threading.Lock()

        def worker():
            for _ in range(200):
                value = clock.now()
                with lock:
                    readings.append(value)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(set(readings)) == 800
