"""
Clock -- Deterministic time abstraction.

Responsibility:
    Provides an injectable clock interface so that domain, engine, and service
    code never call ``datetime.now()`` directly.  Every ledger timestamp is
    taken from a Clock handed to the service at construction time.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O (except SystemClock,
    which is the one sanctioned I/O boundary for time).

Failure modes:
    (none)
"""

import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """
    Abstract clock interface.

    Guarantees:
        - ``now()`` returns a timezone-aware ``datetime``.
        - ``now_utc()`` returns a UTC-normalized ``datetime``.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Get the current time."""
        ...

    def now_utc(self) -> datetime:
        """Get the current UTC time."""
        return self.now().astimezone(timezone.utc)


class SystemClock(Clock):
    """Production clock that returns actual system time (UTC)."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Test clock with controlled time.

    Guarantees:
        - ``now()`` returns the same value on repeated calls until ``advance()``
          or ``set_time()`` is called.
        - ``tick()`` advances by exactly 1 second and returns the new time.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._fixed_time = fixed_time or datetime(
            2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc
        )
        self._advance_seconds = 0

    def now(self) -> datetime:
        return self._fixed_time + timedelta(seconds=self._advance_seconds)

    def set_time(self, time: datetime) -> None:
        """Set the clock to a specific time."""
        self._fixed_time = time
        self._advance_seconds = 0

    def advance(self, seconds: int = 1) -> None:
        """Advance the clock by the specified seconds."""
        self._advance_seconds += seconds

    def tick(self) -> datetime:
        """Advance by 1 second and return new time."""
        self.advance(1)
        return self.now()


class MonotonicClock(Clock):
    """
    Wraps another clock so readings never go backwards.

    Contract:
        Ledger entries are ordered by timestamp.  Wall clocks can step
        backwards (NTP) and a frozen test clock repeats itself, so every
        reading is forced to be strictly later than the previous one, by one
        microsecond if the source has not moved.

    Guarantees:
        - Successive ``now()`` calls on one instance are strictly increasing,
          across threads.
        - Readings equal the source clock whenever the source is ahead.
    """

    _RESOLUTION = timedelta(microseconds=1)

    def __init__(self, source: Clock | None = None):
        self._source = source or SystemClock()
        self._last: datetime | None = None
        self._lock = threading.Lock()

    @property
    def source(self) -> Clock:
        return self._source

    def now(self) -> datetime:
        with self._lock:
            current = self._source.now_utc()
            if self._last is not None and current <= self._last:
                current = self._last + self._RESOLUTION
            self._last = current
            return current
