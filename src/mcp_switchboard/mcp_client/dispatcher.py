"""
Multi-server MCP client.

MCPDispatcher composes the registry, transport, capability cache, health
monitor and error translator into the operations an agent framework uses:
existence checks, action execution, aggregated capability listings,
connection tests and health reporting.
"""
import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog
from pydantic import ValidationError

from ..config import ClientConfig, Settings
from ..models.capabilities import (
    CapabilityEntry,
    MCPPrompt,
    MCPResource,
    MCPSample,
    MCPTool,
    parse_entries,
)
from ..models.common import CapabilityKind
from ..models.health import ServerHealth, ServerStats
from ..models.protocol import ProtocolResponse
from ..models.server import ServerConfig
from ..protocol.error_codes import MCPErrorCode
from ..protocol.methods import MCPMethod
from ..utils.clock import Clock, SystemClock
from .actions import resolve_action
from .cache import BaseCacheStore, CapabilityCache, InMemoryCacheStore
from .error_translator import ErrorTranslator
from .exceptions import (
    MCPClientError,
    MCPExecutionError,
    MCPNotFoundError,
    MCPProtocolError,
)
from .health import HealthMonitor
from .registry import ServerRegistry
from .results import ServerResult
from .transport import AiohttpTransport, BaseHTTPTransport
from .transport_client import TransportClient

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Listings are paged via nextCursor; stop following after this many pages.
MAX_LISTING_PAGES = 100


class MCPDispatcher:
    """
    Public face of the client. Collaborators are injected so tests can swap in
    fakes: `http` (the HTTP transport port), `cache_store` (key/value cache with
    TTL) and `clock`.
    """

    def __init__(
        self,
        registry: ServerRegistry,
        client_config: ClientConfig | None = None,
        http: BaseHTTPTransport | None = None,
        cache_store: BaseCacheStore | None = None,
        clock: Clock | None = None,
        translator: ErrorTranslator | None = None,
    ):
        self.registry = registry
        self.client_config = client_config if client_config is not None else ClientConfig()
        self.clock = clock if clock is not None else SystemClock()
        self.translator = translator or ErrorTranslator()

        self._owns_http = http is None
        self.http = http if http is not None else AiohttpTransport(self.client_config)
        self.transport = TransportClient(self.http, self.translator)
        self.cache = CapabilityCache(
            cache_store if cache_store is not None else InMemoryCacheStore(self.clock),
            default_ttl_seconds=self.client_config.cache_ttl_seconds,
        )
        self.health = HealthMonitor(self.client_config.health_failure_threshold, self.clock)

        # server_id -> capabilities advertised in the server's 'initialize' result
        self._server_capabilities: dict[str, dict[str, Any]] = {}
        self.logger = logger.bind(component="MCPDispatcher")
        self.logger.info("MCP dispatcher initialized", servers=len(registry), max_concurrency=self.client_config.max_concurrency)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http: BaseHTTPTransport | None = None,
        cache_store: BaseCacheStore | None = None,
        clock: Clock | None = None,
    ) -> "MCPDispatcher":
        registry = ServerRegistry.from_mapping(settings.servers, default_timeout=settings.client.default_timeout_seconds)
        return cls(registry, settings.client, http=http, cache_store=cache_store, clock=clock)

    # --- Registry queries ---

    def has_server(self, server_id: str) -> bool:
        return self.registry.has(server_id)

    def get_server(self, server_id: str) -> ServerConfig:
        return self.registry.get(server_id)

    def get_servers(self) -> list[ServerConfig]:
        return self.registry.list()

    # --- Execution ---

    async def execute(self, server_id: str, action: str, params: dict[str, Any] | None = None) -> Any:
        """
        Runs `action` on a server and returns the unwrapped JSON-RPC `result`.

        Raises MCPNotFoundError before any network call when the server is
        unknown or disabled.
        """
        config = self.registry.resolve(server_id)
        method, shaped_params = resolve_action(action, params)
        response = await self._call(config, method, shaped_params)
        return response.get_result()

    async def _call(self, config: ServerConfig, method: str, params: dict[str, Any]) -> ProtocolResponse:
        log = self.logger.bind(server_id=config.id, method=method)
        started = self.clock.monotonic()
        try:
            response = await self.transport.call(config, method, params)
        except MCPClientError:
            await self.health.record_outcome(config.id, False, self.clock.monotonic() - started)
            raise
        except Exception as e:
            # A custom transport port raised something outside the taxonomy
            await self.health.record_outcome(config.id, False, self.clock.monotonic() - started)
            log.exception("Unexpected transport error", error_type=type(e).__name__)
            raise self.translator.from_transport_failure(e, server_id=config.id, timeout=config.timeout) from e

        # A JSON-RPC error reply still proves the server is reachable and speaking the protocol
        await self.health.record_outcome(config.id, True, self.clock.monotonic() - started)

        error = self.translator.from_response(response, server_id=config.id)
        if error is not None:
            log.warning("MCP server returned an error", code=error.code, error_message=error.message)
            raise error
        return response

    async def initialize(self, server_id: str) -> dict[str, Any]:
        """Performs the 'initialize' handshake and remembers the server's advertised capabilities."""
        params = {
            "protocolVersion": self.client_config.protocol_version,
            "capabilities": {
                "tools": {"listChanged": True},
                "resources": {"subscribe": True, "listChanged": True},
                "prompts": {"listChanged": True},
                "samples": {"listChanged": True},
            },
            "clientInfo": {
                "name": self.client_config.client_name,
                "version": self.client_config.client_version,
            },
        }
        result = await self.execute(server_id, "initialize", params)
        if isinstance(result, dict):
            capabilities = result.get("capabilities")
            self._server_capabilities[server_id] = dict(capabilities) if isinstance(capabilities, dict) else {}
        return result

    async def ping(self, server_id: str) -> Any:
        return await self.execute(server_id, "ping")

    async def call_tool(self, server_id: str, tool_name: str, arguments: dict[str, Any] | None = None) -> Any:
        return await self.execute(server_id, "call_tool", {"name": tool_name, "arguments": arguments or {}})

    async def read_resource(self, server_id: str, uri: str) -> Any:
        return await self.execute(server_id, "read_resource", {"uri": uri})

    async def get_prompt(self, server_id: str, prompt_name: str, arguments: dict[str, Any] | None = None) -> Any:
        return await self.execute(server_id, "get_prompt", {"name": prompt_name, "arguments": arguments or {}})

    async def get_sample(self, server_id: str, sample_name: str, arguments: dict[str, Any] | None = None) -> Any:
        return await self.execute(server_id, "get_sample", {"name": sample_name, "arguments": arguments or {}})

    def get_server_capabilities(self, server_id: str) -> dict[str, Any]:
        return dict(self._server_capabilities.get(server_id, {}))

    def supports_capability(self, server_id: str, capability: str) -> bool:
        return capability in self._server_capabilities.get(server_id, {})

    # --- Capability listings ---

    async def _get_listing(self, server_id: str, kind: CapabilityKind) -> list[CapabilityEntry]:
        self.registry.resolve(server_id)
        cached = await self.cache.get(server_id, kind)
        if cached is not None:
            return list(cached)
        token = self.cache.token(server_id)

        items: list[dict[str, Any]] = []
        cursor: str | None = None
        for _ in range(MAX_LISTING_PAGES):
            result = await self.execute(server_id, kind.list_method, {"cursor": cursor} if cursor else None)
            if not isinstance(result, dict):
                raise MCPProtocolError(f"'{kind.list_method}' result from MCP server '{server_id}' is not an object.", server_id=server_id)
            page = result.get(kind.result_key, [])
            if not isinstance(page, list) or not all(isinstance(item, dict) for item in page):
                raise MCPProtocolError(f"'{kind.list_method}' result from MCP server '{server_id}' has a malformed '{kind.result_key}' list.", server_id=server_id)
            items.extend(page)
            cursor = result.get("nextCursor")
            if not cursor:
                break
        else:
            self.logger.warning("Listing truncated after page limit", server_id=server_id, kind=kind.value, pages=MAX_LISTING_PAGES)

        try:
            entries = parse_entries(kind, items, server_id)
        except ValidationError as e:
            raise MCPProtocolError(f"Invalid '{kind.value}' entry from MCP server '{server_id}': {e.error_count()} validation error(s)", data=e.errors(include_url=False), server_id=server_id) from e

        return list(await self.cache.put(server_id, kind, entries, token=token))

    async def get_server_tools(self, server_id: str) -> list[MCPTool]:
        return await self._get_listing(server_id, CapabilityKind.TOOLS) # type: ignore[return-value]

    async def get_server_resources(self, server_id: str) -> list[MCPResource]:
        return await self._get_listing(server_id, CapabilityKind.RESOURCES) # type: ignore[return-value]

    async def get_server_prompts(self, server_id: str) -> list[MCPPrompt]:
        return await self._get_listing(server_id, CapabilityKind.PROMPTS) # type: ignore[return-value]

    async def get_server_samples(self, server_id: str) -> list[MCPSample]:
        return await self._get_listing(server_id, CapabilityKind.SAMPLES) # type: ignore[return-value]

    async def get_tool(self, server_id: str, tool_name: str) -> MCPTool:
        for tool in await self.get_server_tools(server_id):
            if tool.name == tool_name:
                return tool
        raise MCPNotFoundError(
            f"Tool '{tool_name}' not found on MCP server '{server_id}'",
            code=MCPErrorCode.TOOL_NOT_FOUND.value,
            server_id=server_id,
        )

    async def has_tool(self, server_id: str, tool_name: str) -> bool:
        return any(tool.name == tool_name for tool in await self.get_server_tools(server_id))

    async def get_all_tools(self) -> dict[str, ServerResult[list[MCPTool]]]:
        return await self._fan_out(self.get_server_tools)

    async def get_all_resources(self) -> dict[str, ServerResult[list[MCPResource]]]:
        return await self._fan_out(self.get_server_resources)

    async def get_all_prompts(self) -> dict[str, ServerResult[list[MCPPrompt]]]:
        return await self._fan_out(self.get_server_prompts)

    async def get_all_samples(self) -> dict[str, ServerResult[list[MCPSample]]]:
        return await self._fan_out(self.get_server_samples)

    async def _fan_out(self, operation: Callable[[str], Awaitable[T]]) -> dict[str, ServerResult[T]]:
        """
        Runs `operation` once per enabled server, at most `max_concurrency` at a
        time. A server's failure is attached to its own result.
        """
        semaphore = asyncio.Semaphore(self.client_config.max_concurrency)

        async def run(server_id: str) -> ServerResult[T]:
            async with semaphore:
                try:
                    return ServerResult(server_id, value=await operation(server_id))
                except MCPClientError as e:
                    self.logger.warning("Fan-out call failed for server", server_id=server_id, error_kind=e.kind.value, error=str(e))
                    return ServerResult(server_id, error=e)
                except Exception as e:
                    self.logger.exception("Unexpected error in fan-out call", server_id=server_id, error_type=type(e).__name__)
                    error = self.translator.from_transport_failure(e, server_id=server_id)
                    error.__cause__ = e
                    return ServerResult(server_id, error=error)

        results = await asyncio.gather(*(run(server.id) for server in self.registry.enabled()))
        return {result.server_id: result for result in results}

    # --- Connection tests ---

    async def test_connection(self, server_id: str) -> bool:
        """
        Pings the server, falling back to 'initialize' for servers that don't
        implement 'ping'. Never touches the capability cache.
        """
        config = self.registry.resolve(server_id)
        try:
            await self._call(config, MCPMethod.PING.value, {})
            return True
        except MCPExecutionError as e:
            if e.code != MCPErrorCode.METHOD_NOT_FOUND:
                self.logger.warning("Connection test failed", server_id=server_id, error=str(e))
                return False
        except MCPClientError as e:
            self.logger.warning("Connection test failed", server_id=server_id, error_kind=e.kind.value, error=str(e))
            return False

        try:
            await self._call(config, MCPMethod.INITIALIZE.value, {
                "protocolVersion": self.client_config.protocol_version,
                "capabilities": {},
                "clientInfo": {"name": self.client_config.client_name, "version": self.client_config.client_version},
            })
            return True
        except MCPClientError as e:
            self.logger.warning("Connection test failed", server_id=server_id, error_kind=e.kind.value, error=str(e))
            return False

    async def test_connections(self) -> dict[str, bool]:
        results = await self._fan_out(self.test_connection)
        return {server_id: bool(result.ok and result.value) for server_id, result in results.items()}

    # --- Health ---

    def get_server_health(self, server_id: str) -> ServerHealth:
        config = self.registry.get(server_id)
        record = self.health.record_of(server_id)
        return ServerHealth(
            server_id=config.id,
            name=config.name,
            url=str(config.url),
            enabled=config.enabled,
            status=record.status,
            consecutive_failures=record.consecutive_failures,
            consecutive_successes=record.consecutive_successes,
            total_calls=record.total_calls,
            total_failures=record.total_failures,
            last_checked=record.last_checked,
            last_latency_ms=record.last_latency_ms,
        )

    def get_health_status(self) -> dict[str, ServerHealth]:
        return {server_id: self.get_server_health(server_id) for server_id in self.registry.ids()}

    async def check_health(self) -> dict[str, ServerHealth]:
        """Tests every enabled server, then reports health for all of them."""
        await self.test_connections()
        return self.get_health_status()

    # --- Statistics ---

    async def get_server_stats(self, server_id: str) -> ServerStats:
        config = self.registry.get(server_id)
        record = self.health.record_of(server_id)
        counts: dict[str, int | None] = {}
        for kind in CapabilityKind:
            cached = await self.cache.get(server_id, kind)
            counts[f"{kind.value}_count"] = len(cached) if cached is not None else None
        return ServerStats(
            server_id=config.id,
            name=config.name,
            url=str(config.url),
            enabled=config.enabled,
            version=config.version,
            timeout=config.timeout,
            health_status=record.status,
            last_health_check=record.last_checked,
            capabilities=self.get_server_capabilities(server_id),
            **counts,
        )

    async def get_all_server_stats(self) -> dict[str, ServerStats]:
        return {server_id: await self.get_server_stats(server_id) for server_id in self.registry.ids()}

    # --- Cache control ---

    async def refresh_cache(self, server_id: str) -> None:
        self.registry.get(server_id)
        await self.cache.invalidate(server_id)

    async def clear_caches(self) -> None:
        await self.cache.invalidate()

    # --- Lifecycle ---

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "MCPDispatcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
