"""
HTTP transport port and its aiohttp implementation.

The port only moves bytes: it POSTs a JSON body and returns the status and the
body text. Raw transport exceptions (aiohttp.ClientError, TimeoutError, OSError)
propagate to the caller, which maps them onto the error taxonomy.
"""
import abc
from dataclasses import dataclass
from typing import Any

import aiohttp
import structlog

from ..config import ClientConfig

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class HTTPReply:
    status: int
    text: str
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class BaseHTTPTransport(abc.ABC):
    """Issues one JSON POST with headers and a timeout."""

    @abc.abstractmethod
    async def post_json(self, url: str, payload: dict[str, Any], headers: dict[str, str], timeout: float) -> HTTPReply:
        pass

    async def aclose(self) -> None:
        """Releases any pooled connections. No-op by default."""
        pass


class AiohttpTransport(BaseHTTPTransport):
    """
    aiohttp-backed transport. A session can be shared between transports for
    connection pooling; a session passed in is never closed by this object.
    """

    def __init__(self, client_config: ClientConfig | None = None, aiohttp_session: aiohttp.ClientSession | None = None):
        self.client_config = client_config or ClientConfig()
        self._session = aiohttp_session
        self._owns_session = aiohttp_session is None
        self.logger = logger.bind(transport="http")

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self.logger.info("No existing aiohttp session or session closed, creating a new one.")
            cfg = self.client_config
            ssl_context: bool | None = None
            if not cfg.ssl_verify:
                self.logger.warning("SSL verification is DISABLED for HTTP transport. This is insecure for production.")
                ssl_context = False
            connector = aiohttp.TCPConnector(
                limit=cfg.connection_pool_total_limit,
                limit_per_host=cfg.connection_pool_per_host_limit,
                ttl_dns_cache=cfg.connection_pool_dns_cache_ttl_seconds,
                ssl=ssl_context,
            )
            self._session = aiohttp.ClientSession(connector=connector)
            self._owns_session = True
        return self._session

    async def post_json(self, url: str, payload: dict[str, Any], headers: dict[str, str], timeout: float) -> HTTPReply:
        session = await self._get_session()
        request_headers = {"User-Agent": f"{self.client_config.client_name}/{self.client_config.client_version}"}
        request_headers.update(headers)

        async with session.post(
            url,
            json=payload,
            headers=request_headers,
            timeout=aiohttp.ClientTimeout(total=timeout),
        ) as response:
            text = await response.text()
            self.logger.debug("Received HTTP response", url=url, status=response.status, content_length=len(text))
            return HTTPReply(status=response.status, text=text, reason=response.reason)

    async def aclose(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
            self.logger.info("HTTP transport session closed.")
        if self._owns_session:
            self._session = None
