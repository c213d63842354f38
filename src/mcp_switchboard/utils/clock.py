"""
Clock abstraction so TTLs and health timestamps can be driven by tests.
"""
import abc
import time
from datetime import datetime, timezone


class Clock(abc.ABC):
    @abc.abstractmethod
    def monotonic(self) -> float:
        """Seconds from an arbitrary fixed point; used for TTLs and latency."""

    @abc.abstractmethod
    def utcnow(self) -> datetime:
        """Timezone-aware wall-clock time; used for reporting only."""


class SystemClock(Clock):
    def monotonic(self) -> float:
        return time.monotonic()

    def utcnow(self) -> datetime:
        return datetime.now(timezone.utc)
