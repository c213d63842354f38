"""
Maps transport failures and JSON-RPC error payloads onto the error taxonomy.
"""
import asyncio

import aiohttp
import structlog

from ..models.protocol import ProtocolResponse
from ..protocol.error_codes import message_for_code
from .exceptions import MCPConnectionError, MCPExecutionError, MCPTimeoutError

logger = structlog.get_logger(__name__)


class ErrorTranslator:

    def from_transport_failure(self, cause: BaseException, server_id: str | None = None, timeout: float | None = None) -> MCPConnectionError:
        """Wraps a raw transport exception. The caller should raise the result `from cause`."""
        if isinstance(cause, (TimeoutError, asyncio.TimeoutError, aiohttp.ServerTimeoutError)):
            suffix = f" after {timeout}s" if timeout is not None else ""
            return MCPTimeoutError(f"Request to MCP server '{server_id}' timed out{suffix}.", data={"timeout": timeout}, server_id=server_id)
        if isinstance(cause, aiohttp.ClientConnectorError):
            return MCPConnectionError(f"Connection failed to MCP server '{server_id}': {cause.os_error or cause}", server_id=server_id)
        return MCPConnectionError(f"Transport error talking to MCP server '{server_id}': {cause}", data={"error_type": type(cause).__name__}, server_id=server_id)

    def from_response(self, response: ProtocolResponse, server_id: str | None = None) -> MCPExecutionError | None:
        """Returns an execution error when the reply carries an `error` object, otherwise None."""
        error = response.get_error()
        if error is None:
            return None

        code = error.get("code")
        if not isinstance(code, int) or isinstance(code, bool):
            code = None
        message = error.get("message")
        if not isinstance(message, str) or not message:
            message = message_for_code(code)

        logger.debug("JSON-RPC error response", server_id=server_id, code=code, error_message=message, response_id=response.get_id())
        return MCPExecutionError(message, code=code, data=error.get("data"), server_id=server_id)
