"""
Pydantic models for mcp_switchboard.
"""
from .capabilities import (
    ENTRY_MODELS,
    CapabilityEntry,
    MCPPrompt,
    MCPResource,
    MCPSample,
    MCPTool,
    parse_entries,
)
from .common import AuthType, BasePydanticModel, CapabilityKind, HealthStatus
from .health import ServerHealth, ServerStats
from .protocol import JSONRPC_VERSION, ProtocolRequest, ProtocolResponse
from .server import ServerConfig

__all__ = [
    "AuthType",
    "BasePydanticModel",
    "CapabilityEntry",
    "CapabilityKind",
    "ENTRY_MODELS",
    "HealthStatus",
    "JSONRPC_VERSION",
    "MCPPrompt",
    "MCPResource",
    "MCPSample",
    "MCPTool",
    "ProtocolRequest",
    "ProtocolResponse",
    "ServerConfig",
    "ServerHealth",
    "ServerStats",
    "parse_entries",
]
