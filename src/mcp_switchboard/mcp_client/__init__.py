"""
Multi-server MCP client.

JSON-RPC 2.0 over HTTP request/response, with a server registry, capability
cache, passive health monitoring and a structured error taxonomy.
"""

from .actions import ACTION_TABLE, ActionSpec, resolve_action
from .cache import BaseCacheStore, CapabilityCache, InMemoryCacheStore
from .dispatcher import MCPDispatcher
from .error_translator import ErrorTranslator
from .exceptions import (
    ErrorKind,
    MCPClientError,
    MCPConnectionError,
    MCPExecutionError,
    MCPNotFoundError,
    MCPProtocolError,
    MCPTimeoutError,
)
from .health import HealthMonitor, HealthRecord
from .registry import ServerRegistry
from .results import ServerResult
from .transport import AiohttpTransport, BaseHTTPTransport, HTTPReply
from .transport_client import TransportClient

__all__ = [
    "ACTION_TABLE",
    "ActionSpec",
    "AiohttpTransport",
    "BaseCacheStore",
    "BaseHTTPTransport",
    "CapabilityCache",
    "ErrorKind",
    "ErrorTranslator",
    "HTTPReply",
    "HealthMonitor",
    "HealthRecord",
    "InMemoryCacheStore",
    "MCPClientError",
    "MCPConnectionError",
    "MCPDispatcher",
    "MCPExecutionError",
    "MCPNotFoundError",
    "MCPProtocolError",
    "MCPTimeoutError",
    "ServerRegistry",
    "ServerResult",
    "TransportClient",
    "resolve_action",
]
