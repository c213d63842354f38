"""Configuration management for MCP Switchboard."""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format ('json' or 'console')")
    file: Path | None = Field(default=None, description="Log file path")

class ClientConfig(BaseModel):
    """Configuration for the multi-server MCP client."""
    cache_ttl_seconds: float = Field(default=86400.0, gt=0, description="TTL of cached tool/resource/prompt/sample listings.")
    max_concurrency: int = Field(default=4, ge=1, le=64, description="Maximum servers queried in parallel by fan-out operations.")
    health_failure_threshold: int = Field(default=3, ge=1, description="Consecutive failures after which a server is reported unhealthy.")
    default_timeout_seconds: float = Field(default=30.0, gt=0, description="Per-call timeout for servers that don't configure their own.")
    connection_pool_total_limit: int = Field(default=100, ge=1, description="Total connection pool limit for the aiohttp session.")
    connection_pool_per_host_limit: int = Field(default=30, ge=1, description="Per-host connection pool limit for the aiohttp session.")
    connection_pool_dns_cache_ttl_seconds: int = Field(default=300, ge=0, description="DNS cache TTL in seconds for the aiohttp session.")
    ssl_verify: bool = Field(default=True, description="Enable/disable SSL certificate verification.")
    protocol_version: str = Field(default="2024-11-05", description="MCP protocol version sent in 'initialize'.")
    client_name: str = Field(default="MCPSwitchboard", description="Client name sent in 'initialize' and the User-Agent header.")
    client_version: str = Field(default="0.1.0")


class Settings(BaseSettings):
    """Main configuration for MCP Switchboard. Loads from environment variables prefixed with MCP_SWITCHBOARD_."""

    model_config = SettingsConfigDict(
        env_prefix='MCP_SWITCHBOARD_',
        env_nested_delimiter='__', # e.g., MCP_SWITCHBOARD_CLIENT__MAX_CONCURRENCY
        extra='ignore',
        env_file='.env',
        env_file_encoding='utf-8'
    )

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    servers: dict[str, dict[str, Any]] = Field(default_factory=dict, description="Per-server configuration keyed by server id.")

    @classmethod
    def from_file(cls, file_path: Path) -> "Settings":
        """Create configuration strictly from a JSON file.
        This does not layer with environment variables.
        """
        with open(file_path) as f:
            config_data = json.load(f)
        return cls.model_validate(config_data)
