"""
Shared fixtures: a scripted HTTP transport, a controllable clock and a small
set of configured servers.
"""
import inspect
import json
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from mcp_switchboard.config import ClientConfig
from mcp_switchboard.mcp_client.dispatcher import MCPDispatcher
from mcp_switchboard.mcp_client.registry import ServerRegistry
from mcp_switchboard.mcp_client.transport import BaseHTTPTransport, HTTPReply
from mcp_switchboard.utils.clock import Clock

ALPHA_URL = "http://alpha.example.com/mcp"
BETA_URL = "http://beta.example.com/mcp"
GAMMA_URL = "http://gamma.example.com/mcp"
OFF_URL = "http://off.example.com/mcp"


class FakeClock(Clock):
    def __init__(self, start: float = 1000.0):
        self.now = start
        self._epoch = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def monotonic(self) -> float:
        return self.now

    def utcnow(self) -> datetime:
        return self._epoch + timedelta(seconds=self.now)


@dataclass
class RecordedCall:
    url: str
    payload: dict[str, Any]
    headers: dict[str, str]
    timeout: float

    @property
    def method(self) -> str:
        return self.payload["method"]


Handler = Callable[[dict[str, Any]], Any]


class FakeHTTPTransport(BaseHTTPTransport):
    """
    Routes each POST to a handler registered for its URL. A handler gets the
    JSON-RPC payload and returns a reply dict, an HTTPReply, or raises.
    """

    def __init__(self):
        self.calls: list[RecordedCall] = []
        self.handlers: dict[str, Handler] = {}
        self.closed = False

    def route(self, url: str, handler: Handler) -> None:
        self.handlers[url] = handler

    def calls_to(self, url: str) -> list[RecordedCall]:
        return [c for c in self.calls if c.url == url]

    async def post_json(self, url: str, payload: dict[str, Any], headers: dict[str, str], timeout: float) -> HTTPReply:
        self.calls.append(RecordedCall(url, payload, dict(headers), timeout))
        outcome = self.handlers[url](payload)
        if inspect.isawaitable(outcome):
            outcome = await outcome
        if isinstance(outcome, HTTPReply):
            return outcome
        return HTTPReply(status=200, text=json.dumps(outcome))

    async def aclose(self) -> None:
        self.closed = True


def result_reply(payload: dict[str, Any], result: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": payload["id"], "result": result}


def error_reply(payload: dict[str, Any], code: int, message: str, data: Any = None) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": "2.0", "id": payload["id"], "error": error}


def method_router(results: dict[str, Any]) -> Handler:
    """Answers each method with the given result; unknown methods get -32601."""
    def handle(payload: dict[str, Any]) -> dict[str, Any]:
        method = payload["method"]
        if method not in results:
            return error_reply(payload, -32601, "Method not found")
        result = results[method]
        if isinstance(result, Exception):
            raise result
        return result_reply(payload, result(payload) if callable(result) else result)
    return handle


SERVERS_CONFIG = {
    "alpha": {"name": "Alpha", "url": ALPHA_URL, "auth_token": "tok-a"},
    "beta": {"name": "Beta", "url": BETA_URL, "auth_type": "api_key", "auth_token": "key-b"},
    "gamma": {"name": "Gamma", "url": GAMMA_URL, "timeout": 5},
    "off": {"name": "Off", "url": OFF_URL, "enabled": False},
}


def tools_result(*names: str) -> dict[str, Any]:
    return {"tools": [{"name": n, "description": f"{n} tool", "inputSchema": {"type": "object"}} for n in names]}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_http():
    return FakeHTTPTransport()


@pytest.fixture
def registry():
    return ServerRegistry.from_mapping(SERVERS_CONFIG, default_timeout=10.0)


@pytest.fixture
def client_config():
    return ClientConfig(cache_ttl_seconds=60.0, max_concurrency=2, health_failure_threshold=3)


@pytest.fixture
def dispatcher(registry, client_config, fake_http, clock):
    return MCPDispatcher(registry, client_config, http=fake_http, clock=clock)
