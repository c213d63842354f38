"""
Registry of configured MCP servers.
"""
from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from ..models.server import ServerConfig
from .exceptions import MCPNotFoundError

logger = structlog.get_logger(__name__)


class ServerRegistry:
    """
    Immutable set of server configurations keyed by id, in configuration order.
    Disabled servers are kept for introspection but `has()` and `resolve()`
    reject them.
    """

    def __init__(self, servers: Iterable[ServerConfig] = ()):
        self._servers: dict[str, ServerConfig] = {}
        for server in servers:
            if server.id in self._servers:
                raise ValueError(f"Duplicate MCP server id '{server.id}' in configuration.")
            self._servers[server.id] = server
        logger.info(
            "Server registry initialized",
            servers=len(self._servers),
            enabled=sum(1 for s in self._servers.values() if s.enabled),
        )

    @classmethod
    def from_mapping(cls, servers: Mapping[str, Mapping[str, Any]], default_timeout: float | None = None) -> "ServerRegistry":
        return cls(ServerConfig.from_mapping(server_id, dict(data), default_timeout) for server_id, data in servers.items())

    def has(self, server_id: str) -> bool:
        server = self._servers.get(server_id)
        return server is not None and server.enabled

    def get(self, server_id: str) -> ServerConfig:
        """Returns the config whether or not the server is enabled."""
        try:
            return self._servers[server_id]
        except KeyError:
            raise MCPNotFoundError.for_server(server_id) from None

    def resolve(self, server_id: str) -> ServerConfig:
        """Returns the config of an enabled server."""
        server = self.get(server_id)
        if not server.enabled:
            raise MCPNotFoundError.for_server(server_id)
        return server

    def list(self) -> "list[ServerConfig]":
        return list(self._servers.values())

    def enabled(self) -> "list[ServerConfig]":
        return [s for s in self._servers.values() if s.enabled]

    def ids(self) -> "list[str]":
        return list(self._servers)

    def __len__(self) -> int:
        return len(self._servers)

    def __contains__(self, server_id: object) -> bool:
        return server_id in self._servers
