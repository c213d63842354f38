"""
JSON-RPC and MCP error codes.

Two disjoint ranges are reserved: the standard JSON-RPC codes (-32700..-32600)
and the MCP-specific codes (-32001..-32011). Each code has exactly one
canonical message.
"""
from enum import IntEnum

UNKNOWN_ERROR_MESSAGE = "Unknown error"


class MCPErrorCode(IntEnum):
    # JSON-RPC 2.0
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # MCP specific
    INVALID_PROTOCOL_VERSION = -32001
    INVALID_CAPABILITIES = -32002
    SERVER_ERROR = -32003
    TOOL_NOT_FOUND = -32004
    RESOURCE_NOT_FOUND = -32005
    PROMPT_NOT_FOUND = -32006
    SAMPLE_NOT_FOUND = -32007
    UNAUTHORIZED = -32008
    FORBIDDEN = -32009
    RATE_LIMITED = -32010
    TIMEOUT = -32011


_CANONICAL_MESSAGES: dict[MCPErrorCode, str] = {
    MCPErrorCode.PARSE_ERROR: "Parse error",
    MCPErrorCode.INVALID_REQUEST: "Invalid Request",
    MCPErrorCode.METHOD_NOT_FOUND: "Method not found",
    MCPErrorCode.INVALID_PARAMS: "Invalid params",
    MCPErrorCode.INTERNAL_ERROR: "Internal error",
    MCPErrorCode.INVALID_PROTOCOL_VERSION: "Invalid protocol version",
    MCPErrorCode.INVALID_CAPABILITIES: "Invalid capabilities",
    MCPErrorCode.SERVER_ERROR: "Server error",
    MCPErrorCode.TOOL_NOT_FOUND: "Tool not found",
    MCPErrorCode.RESOURCE_NOT_FOUND: "Resource not found",
    MCPErrorCode.PROMPT_NOT_FOUND: "Prompt not found",
    MCPErrorCode.SAMPLE_NOT_FOUND: "Sample not found",
    MCPErrorCode.UNAUTHORIZED: "Unauthorized",
    MCPErrorCode.FORBIDDEN: "Forbidden",
    MCPErrorCode.RATE_LIMITED: "Rate limited",
    MCPErrorCode.TIMEOUT: "Timeout",
}


def is_reserved_code(code: int | None) -> bool:
    """True if `code` belongs to one of the two reserved ranges."""
    if code is None:
        return False
    try:
        MCPErrorCode(code)
    except ValueError:
        return False
    return True


def message_for_code(code: int | None) -> str:
    """Returns the canonical message for `code`, or "Unknown error" outside the reserved ranges."""
    if not is_reserved_code(code):
        return UNKNOWN_ERROR_MESSAGE
    return _CANONICAL_MESSAGES[MCPErrorCode(code)]
