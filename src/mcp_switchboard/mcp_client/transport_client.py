"""
Executes one JSON-RPC call against one server.
"""
import asyncio
import itertools
import json
from typing import Any

import aiohttp
import structlog

from ..models.protocol import ProtocolRequest, ProtocolResponse
from ..models.server import ServerConfig
from .error_translator import ErrorTranslator
from .exceptions import MCPConnectionError, MCPProtocolError
from .transport import BaseHTTPTransport

logger = structlog.get_logger(__name__)

# Exceptions a transport port may raise for network-level failures.
TRANSPORT_FAILURES = (aiohttp.ClientError, TimeoutError, asyncio.TimeoutError, OSError)


class TransportClient:
    """
    Builds the request envelope, applies the server's timeout as a hard deadline
    and parses the body into a ProtocolResponse.

    Raises MCPConnectionError (or MCPTimeoutError) for network failures and
    non-2xx statuses, MCPProtocolError for bodies that are not a JSON-RPC reply.
    A JSON-RPC `error` reply is returned, not raised; see ErrorTranslator.from_response.
    """

    def __init__(self, http: BaseHTTPTransport, translator: ErrorTranslator | None = None):
        self.http = http
        self.translator = translator or ErrorTranslator()
        self._request_ids = itertools.count(1) # Monotonic per client, deterministic in tests

    def next_request_id(self) -> int:
        return next(self._request_ids)

    async def call(self, config: ServerConfig, method: str, params: dict[str, Any] | None = None) -> ProtocolResponse:
        request = ProtocolRequest(method=method, params=params or {}, id=self.next_request_id())
        log = logger.bind(server_id=config.id, method=method, request_id=request.id)
        log.debug("Sending JSON-RPC request", url=str(config.url), timeout=config.timeout)

        try:
            reply = await asyncio.wait_for(
                self.http.post_json(str(config.url), request.to_payload(), config.get_all_headers(), config.timeout),
                timeout=config.timeout,
            )
        except TRANSPORT_FAILURES as e:
            error = self.translator.from_transport_failure(e, server_id=config.id, timeout=config.timeout)
            log.warning("Transport failure", error_type=type(e).__name__, error=str(error))
            raise error from e

        if not reply.ok:
            log.error("HTTP error status received", status=reply.status, reason=reply.reason, response_body=reply.text[:500])
            reason = f" {reply.reason}" if reply.reason else ""
            raise MCPConnectionError(
                f"HTTP error {reply.status}{reason} from MCP server '{config.id}'",
                data={"status": reply.status, "body": reply.text[:500]},
                server_id=config.id,
            )

        try:
            payload = json.loads(reply.text)
        except json.JSONDecodeError as e:
            log.error("Failed to decode JSON response", error=str(e), response_text=reply.text[:500])
            raise MCPProtocolError(f"Failed to decode JSON response from MCP server '{config.id}': {e}", server_id=config.id) from e

        if not isinstance(payload, dict):
            log.error("JSON-RPC response is not an object", payload_type=type(payload).__name__)
            raise MCPProtocolError(f"Expected a JSON object from MCP server '{config.id}', got {type(payload).__name__}", server_id=config.id)

        # A null `error` is the same as no error
        error = payload.get("error")
        if "result" not in payload and error is None:
            log.error("Invalid JSON-RPC response: neither 'result' nor 'error' present", response_snippet=str(payload)[:200])
            raise MCPProtocolError("Invalid JSON-RPC response: missing 'result' field.", server_id=config.id)

        if error is not None and not isinstance(error, dict):
            raise MCPProtocolError("Invalid JSON-RPC response: 'error' must be an object.", server_id=config.id)

        response = ProtocolResponse.from_payload(payload)
        response_id = response.get_id()
        if response_id is not None and response_id != request.id:
            log.error("JSON-RPC response ID mismatch", expected_id=request.id, received_id=response_id)
            raise MCPProtocolError(
                f"JSON-RPC response ID mismatch. Expected {request.id}, got {response_id}",
                server_id=config.id,
            )

        log.debug("Received JSON-RPC response", is_error=response.is_error())
        return response
