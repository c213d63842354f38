"""MCP Switchboard - asyncio client for invoking tools, resources and prompts across many MCP servers.

Discovers and calls capabilities exposed by independently configured MCP
servers over JSON-RPC 2.0 on HTTP, with listing caches, passive health
tracking and a structured error taxonomy.
"""

__version__ = "0.1.0"

from .config import ClientConfig, LoggingConfig, Settings
from .logging_config import configure_logging
from .mcp_client import MCPDispatcher, ServerRegistry

__all__ = [
    "ClientConfig",
    "LoggingConfig",
    "MCPDispatcher",
    "ServerRegistry",
    "Settings",
    "configure_logging",
]
