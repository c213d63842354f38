"""
Error taxonomy of the MCP client.

Every public operation either returns a value or raises exactly one of the four
kinds below. The kind is also available as a tag (`error.kind`) so callers can
dispatch on it without isinstance chains.
"""
from enum import Enum
from typing import Any

from ..protocol.error_codes import message_for_code


class ErrorKind(str, Enum):
    CONNECTION = "connection"
    PROTOCOL = "protocol"
    EXECUTION = "execution"
    NOT_FOUND = "not_found"


class MCPClientError(Exception):
    """Base class for all MCP client errors."""
    kind: ErrorKind

    def __init__(self, message: str, code: int | None = None, data: Any = None, server_id: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data
        self.server_id = server_id

    @property
    def retryable(self) -> bool:
        return self.kind == ErrorKind.CONNECTION

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "code": self.code,
            "data": self.data,
            "server_id": self.server_id,
        }

class MCPConnectionError(MCPClientError):
    """Network unreachable, timeout, or an unusable transport-level response. Retryable by the caller."""
    kind = ErrorKind.CONNECTION

class MCPTimeoutError(MCPConnectionError):
    """The per-call deadline expired before the server replied."""
    pass

class MCPProtocolError(MCPClientError):
    """The reply violates the expected JSON-RPC shape. Not retryable."""
    kind = ErrorKind.PROTOCOL

class MCPExecutionError(MCPClientError):
    """The server returned a well-formed JSON-RPC error; code and message are the server's own."""
    kind = ErrorKind.EXECUTION

    @property
    def canonical_message(self) -> str:
        return message_for_code(self.code)

class MCPNotFoundError(MCPClientError):
    """Unknown or disabled server id, or a capability absent from a listing. Raised before any network call."""
    kind = ErrorKind.NOT_FOUND

    @classmethod
    def for_server(cls, server_id: str) -> "MCPNotFoundError":
        return cls(f"MCP server '{server_id}' not found or not enabled", server_id=server_id)
