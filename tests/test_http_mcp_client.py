"""
Unit tests for AiohttpTransport and TransportClient.
"""
import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from mcp_switchboard.config import ClientConfig
from mcp_switchboard.mcp_client.exceptions import (
    ErrorKind,
    MCPConnectionError,
    MCPProtocolError,
    MCPTimeoutError,
)
from mcp_switchboard.mcp_client.transport import AiohttpTransport, HTTPReply
from mcp_switchboard.mcp_client.transport_client import TransportClient
from mcp_switchboard.models.server import ServerConfig


@pytest.fixture
def client_config():
    return ClientConfig(client_name="TestClient", client_version="9.9")

@pytest.fixture
def server_config():
    return ServerConfig.from_mapping("http_server_1", {
        "name": "TestHTTPServer",
        "url": "http://fake-server.example.com:8080/mcp",
        "auth_token": "abc",
        "timeout": 7,
    })

def make_response(body, status=200, reason="OK"):
    response = MagicMock()
    response.status = status
    response.reason = reason
    response.text = AsyncMock(return_value=body if isinstance(body, str) else json.dumps(body))
    return response

@pytest.fixture
def mock_session():
    """A ClientSession stand-in whose post() is usable as an async context manager."""
    session = MagicMock(spec=aiohttp.ClientSession)
    session.closed = False
    session.close = AsyncMock()
    session.post = MagicMock()
    session.post.return_value.__aenter__.return_value = make_response({"jsonrpc": "2.0", "id": 1, "result": "success"})
    return session

@pytest.fixture
def transport_client(client_config, mock_session):
    return TransportClient(AiohttpTransport(client_config, aiohttp_session=mock_session))

def reply_with(mock_session, body, status=200, reason="OK"):
    mock_session.post.return_value.__aenter__.return_value = make_response(body, status, reason)


@pytest.mark.asyncio
async def test_call_success(transport_client, mock_session, server_config):
    response = await transport_client.call(server_config, "tools/list")

    assert response.is_success()
    assert response.get_result() == "success"

    mock_session.post.assert_called_once()
    args, kwargs = mock_session.post.call_args
    assert args[0] == "http://fake-server.example.com:8080/mcp"
    assert kwargs["json"] == {"jsonrpc": "2.0", "id": 1, "method": "tools/list", "params": {}}
    assert kwargs["headers"]["Authorization"] == "Bearer abc"
    assert kwargs["headers"]["Content-Type"] == "application/json"
    assert kwargs["headers"]["User-Agent"] == "TestClient/9.9"
    assert kwargs["timeout"].total == 7

@pytest.mark.asyncio
async def test_request_ids_increase_per_client(transport_client, mock_session, server_config):
    reply_with(mock_session, {"jsonrpc": "2.0", "result": {}}) # No id in reply: accepted
    await transport_client.call(server_config, "ping")
    await transport_client.call(server_config, "ping")

    ids = [c.kwargs["json"]["id"] for c in mock_session.post.call_args_list]
    assert ids == [1, 2]

@pytest.mark.asyncio
async def test_jsonrpc_error_reply_is_returned_not_raised(transport_client, mock_session, server_config):
    reply_with(mock_session, {"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "Method not found"}})
    response = await transport_client.call(server_config, "foo/bar")
    assert response.is_error()
    assert response.get_error_code() == -32601

@pytest.mark.asyncio
async def test_http_error_status(transport_client, mock_session, server_config):
    reply_with(mock_session, "Internal Server Error", status=500, reason="Internal Server Error")
    with pytest.raises(MCPConnectionError, match="HTTP error 500 Internal Server Error") as exc_info:
        await transport_client.call(server_config, "ping")
    assert exc_info.value.kind == ErrorKind.CONNECTION
    assert exc_info.value.data["status"] == 500
    assert exc_info.value.server_id == "http_server_1"

@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 403])
async def test_auth_statuses_are_connection_errors(transport_client, mock_session, server_config, status):
    reply_with(mock_session, "denied", status=status, reason="Denied")
    with pytest.raises(MCPConnectionError):
        await transport_client.call(server_config, "ping")

@pytest.mark.asyncio
async def test_timeout(transport_client, mock_session, server_config):
    mock_session.post.side_effect = asyncio.TimeoutError()
    with pytest.raises(MCPTimeoutError, match="timed out after 7.0s") as exc_info:
        await transport_client.call(server_config, "ping")
    assert exc_info.value.retryable

@pytest.mark.asyncio
async def test_connection_error(transport_client, mock_session, server_config):
    mock_session.post.side_effect = aiohttp.ClientConnectorError(MagicMock(), OSError(111, "Connection refused"))
    with pytest.raises(MCPConnectionError, match="Connection failed to MCP server 'http_server_1'") as exc_info:
        await transport_client.call(server_config, "ping")
    assert not isinstance(exc_info.value, MCPTimeoutError)
    assert isinstance(exc_info.value.__cause__, aiohttp.ClientConnectorError)

@pytest.mark.asyncio
async def test_other_client_error(transport_client, mock_session, server_config):
    mock_session.post.side_effect = aiohttp.ClientPayloadError("truncated")
    with pytest.raises(MCPConnectionError, match="Transport error"):
        await transport_client.call(server_config, "ping")

@pytest.mark.asyncio
async def test_invalid_json(transport_client, mock_session, server_config):
    reply_with(mock_session, "not json")
    with pytest.raises(MCPProtocolError, match="Failed to decode JSON response"):
        await transport_client.call(server_config, "ping")

@pytest.mark.asyncio
@pytest.mark.parametrize("body, message", [
    ([1, 2, 3], "Expected a JSON object"),
    ({"jsonrpc": "2.0", "id": 1}, "missing 'result' field"),
    ({"jsonrpc": "2.0", "id": 1, "error": "boom"}, "'error' must be an object"),
    ({"jsonrpc": "2.0", "id": 42, "result": {}}, "ID mismatch"),
])
async def test_malformed_replies(transport_client, mock_session, server_config, body, message):
    reply_with(mock_session, body)
    with pytest.raises(MCPProtocolError, match=message) as exc_info:
        await transport_client.call(server_config, "ping")
    assert exc_info.value.kind == ErrorKind.PROTOCOL

@pytest.mark.asyncio
async def test_transport_does_not_close_borrowed_session(client_config, mock_session):
    transport = AiohttpTransport(client_config, aiohttp_session=mock_session)
    await transport.aclose()
    mock_session.close.assert_not_called()

@pytest.mark.asyncio
async def test_post_json_returns_reply(client_config, mock_session):
    transport = AiohttpTransport(client_config, aiohttp_session=mock_session)
    reply_with(mock_session, "teapot", status=418, reason="I'm a teapot")
    reply = await transport.post_json("http://x.example.com", {"a": 1}, {"X-Trace": "1"}, 3.0)
    assert reply == HTTPReply(status=418, text="teapot", reason="I'm a teapot")
    assert not reply.ok

@pytest.mark.asyncio
async def test_null_error_is_no_error(transport_client, mock_session, server_config):
    reply_with(mock_session, {"jsonrpc": "2.0", "id": 1, "result": {"ok": True}, "error": None})
    response = await transport_client.call(server_config, "ping")
    assert response.is_success()
    assert not response.is_error()
    assert response.get_result() == {"ok": True}

@pytest.mark.asyncio
async def test_null_error_without_result(transport_client, mock_session, server_config):
    reply_with(mock_session, {"jsonrpc": "2.0", "id": 1, "error": None})
    with pytest.raises(MCPProtocolError, match="missing 'result' field"):
        await transport_client.call(server_config, "ping")
