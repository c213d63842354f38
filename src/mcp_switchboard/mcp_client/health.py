"""
Passive per-server health tracking.

Health is derived from the outcomes of calls the client already makes; the
monitor never issues network calls of its own and never blocks a call.
"""
import asyncio
from dataclasses import dataclass
from datetime import datetime

import structlog

from ..models.common import HealthStatus
from ..utils.clock import Clock, SystemClock

logger = structlog.get_logger(__name__)


@dataclass
class HealthRecord:
    """Rolling health of one server."""

    server_id: str
    consecutive_failures: int = 0
    consecutive_successes: int = 0
    total_calls: int = 0
    total_failures: int = 0
    last_checked: datetime | None = None
    last_latency_ms: float | None = None
    status: HealthStatus = HealthStatus.HEALTHY

    def snapshot(self) -> "HealthRecord":
        return HealthRecord(**self.__dict__)


class HealthMonitor:
    """
    State machine per server: starts healthy; each failure moves it to degraded
    until `failure_threshold` consecutive failures make it unhealthy. A single
    success returns it to healthy at once and zeroes both counters.
    """

    def __init__(self, failure_threshold: int = 3, clock: Clock | None = None):
        if failure_threshold < 1:
            raise ValueError("Failure threshold must be at least 1.")
        self.failure_threshold = failure_threshold
        self.clock = clock if clock is not None else SystemClock()
        self._records: dict[str, HealthRecord] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, server_id: str) -> asyncio.Lock:
        lock = self._locks.get(server_id)
        if lock is None:
            lock = self._locks[server_id] = asyncio.Lock()
        return lock

    async def record_outcome(self, server_id: str, success: bool, latency_seconds: float | None = None) -> HealthStatus:
        async with self._lock_for(server_id):
            record = self._records.get(server_id)
            if record is None:
                record = self._records[server_id] = HealthRecord(server_id=server_id)
            previous = record.status

            record.total_calls += 1
            record.last_checked = self.clock.utcnow()
            if latency_seconds is not None:
                record.last_latency_ms = round(latency_seconds * 1000.0, 3)

            if success:
                if record.status != HealthStatus.HEALTHY:
                    record.consecutive_failures = 0
                    record.consecutive_successes = 0
                else:
                    record.consecutive_successes += 1
                    record.consecutive_failures = 0
                record.status = HealthStatus.HEALTHY
            else:
                record.total_failures += 1
                record.consecutive_failures += 1
                record.consecutive_successes = 0
                if record.consecutive_failures >= self.failure_threshold:
                    record.status = HealthStatus.UNHEALTHY
                else:
                    record.status = HealthStatus.DEGRADED

            if record.status != previous:
                log = logger.bind(server_id=server_id, previous=previous.value, current=record.status.value)
                if record.status == HealthStatus.HEALTHY:
                    log.info("MCP server recovered")
                else:
                    log.warning("MCP server health changed", consecutive_failures=record.consecutive_failures)
            return record.status

    def status_of(self, server_id: str) -> HealthStatus:
        record = self._records.get(server_id)
        return record.status if record else HealthStatus.HEALTHY

    def status_of_all(self) -> dict[str, HealthStatus]:
        return {server_id: record.status for server_id, record in self._records.items()}

    def record_of(self, server_id: str) -> HealthRecord:
        """Returns a copy of the server's record; a fresh healthy record if never observed."""
        record = self._records.get(server_id)
        return record.snapshot() if record else HealthRecord(server_id=server_id)
