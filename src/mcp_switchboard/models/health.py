"""
Read-only health and statistics reports.
"""
from datetime import datetime
from typing import Any

from pydantic import Field

from .common import BasePydanticModel, HealthStatus


class ServerHealth(BasePydanticModel):
    server_id: str
    name: str
    url: str
    enabled: bool
    status: HealthStatus = HealthStatus.HEALTHY
    consecutive_failures: int = 0
    consecutive_successes: int = 0
    total_calls: int = 0
    total_failures: int = 0
    last_checked: datetime | None = None
    last_latency_ms: float | None = None


class ServerStats(BasePydanticModel):
    server_id: str
    name: str
    url: str
    enabled: bool
    version: str | None = None
    timeout: float
    health_status: HealthStatus
    last_health_check: datetime | None = None
    # None means the listing is not currently cached; no network call is made to count it
    tools_count: int | None = None
    resources_count: int | None = None
    prompts_count: int | None = None
    samples_count: int | None = None
    capabilities: dict[str, Any] = Field(default_factory=dict)
