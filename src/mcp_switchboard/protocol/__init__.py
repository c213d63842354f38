"""
Wire-level constants for the MCP JSON-RPC protocol: method catalog and error codes.
"""
from .error_codes import MCPErrorCode, is_reserved_code, message_for_code
from .methods import (
    MCPMethod,
    NOTIFICATION_PREFIX,
    all_methods,
    is_known_method,
    is_notification,
    is_request,
)

__all__ = [
    "MCPErrorCode",
    "MCPMethod",
    "NOTIFICATION_PREFIX",
    "all_methods",
    "is_known_method",
    "is_notification",
    "is_request",
    "is_reserved_code",
    "message_for_code",
]
