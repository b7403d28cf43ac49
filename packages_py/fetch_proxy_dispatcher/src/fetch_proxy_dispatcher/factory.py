"""
Explicitly owned pool of long-lived HTTP clients.

A DispatcherPool is created once (typically at application startup),
passed to whatever needs to send requests, and closed on shutdown.
It owns one direct client and one proxied client per distinct proxy
URL. Clients are never reconfigured per request, only selected.
"""
import asyncio
import logging
from typing import Any, Dict, Optional, Type

from fetch_proxy_config import DispatchDecision, mask_proxy_url

from .config import get_ca_bundle_from_env
from .models import DispatcherResult, PoolConfig, ProxyConfig
from .adapters.base import BaseAdapter
from .adapters.adapter_httpx import HttpxAdapter

logger = logging.getLogger(__name__)


class DispatcherPool:
    """
    Owner of the direct and proxied clients.

    Example:
        >>> async with DispatcherPool() as pool:
        ...     result = resolve_dispatcher("https://api.figma.com/v1/me", pool)
        ...     response = await result.client.get("https://api.figma.com/v1/me")
    """

    # Adapter registry
    _adapters: Dict[str, Type[BaseAdapter]] = {"httpx": HttpxAdapter}

    def __init__(
        self,
        config: Optional[PoolConfig] = None,
        adapter: str = "httpx",
    ):
        """
        Initialize the pool and its direct client.

        Args:
            config: Timeout/TLS settings applied to every client.
            adapter: Adapter name to use (default: "httpx").

        Raises:
            KeyError: If adapter name is not registered.
        """
        self._config = config or PoolConfig()
        self._adapter = self._adapters[adapter]()
        self._closed = False

        direct_config = self._client_config(None)
        self._direct = self._adapter.create_async_client(direct_config)
        self._direct_kwargs = self._adapter.get_proxy_dict(direct_config)
        self._proxied: Dict[str, Any] = {}
        self._proxied_kwargs: Dict[str, Dict[str, Any]] = {}

        logger.debug(
            f"[DispatcherPool] initialized: adapter={adapter}, timeout={self._config.timeout}s"
        )

    def _client_config(self, proxy_url: Optional[str]) -> ProxyConfig:
        verify_ssl = self._config.verify_ssl if self._config.verify_ssl is not None else True
        return ProxyConfig(
            proxy_url=proxy_url,
            verify_ssl=verify_ssl,
            timeout=self._config.timeout,
            trust_env=False,
            cert=self._config.cert,
            ca_bundle=self._config.ca_bundle or get_ca_bundle_from_env(),
        )

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def proxy_urls(self) -> list:
        """Proxy URLs that currently have a client in the pool."""
        return list(self._proxied.keys())

    def client_for(self, decision: DispatchDecision) -> DispatcherResult:
        """
        Select the client matching a dispatch decision.

        Proxied clients are created on first use for a proxy URL and reused
        afterwards.

        Raises:
            RuntimeError: If the pool has been closed.
        """
        if self._closed:
            raise RuntimeError("DispatcherPool has been closed")

        if not decision.use_proxy or not decision.proxy_url:
            return DispatcherResult(
                client=self._direct,
                decision=decision,
                proxy_dict=self._direct_kwargs,
            )

        proxy_url = decision.proxy_url
        client = self._proxied.get(proxy_url)
        if client is None:
            logger.debug(f"[DispatcherPool] creating client for proxy={mask_proxy_url(proxy_url)}")
            proxy_config = self._client_config(proxy_url)
            client = self._adapter.create_async_client(proxy_config)
            self._proxied[proxy_url] = client
            self._proxied_kwargs[proxy_url] = self._adapter.get_proxy_dict(proxy_config)

        return DispatcherResult(
            client=client,
            decision=decision,
            proxy_dict=self._proxied_kwargs[proxy_url],
        )

    async def aclose(self) -> None:
        """Close every owned client. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True

        clients = [self._direct, *self._proxied.values()]
        results = await asyncio.gather(
            *(client.aclose() for client in clients),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                logger.error(f"[DispatcherPool] error closing client: {type(result).__name__}: {result}")
        self._proxied.clear()
        self._proxied_kwargs.clear()
        logger.debug(f"[DispatcherPool] closed {len(clients)} client(s)")

    async def __aenter__(self) -> "DispatcherPool":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    @classmethod
    def register_adapter(cls, name: str, adapter_class: Type[BaseAdapter]) -> None:
        """
        Register a new adapter.

        Args:
            name: Adapter name for lookup.
            adapter_class: Adapter class to register.
        """
        cls._adapters[name] = adapter_class


def create_dispatcher_pool(
    config: Optional[PoolConfig] = None,
    adapter: str = "httpx",
) -> DispatcherPool:
    """
    Create a DispatcherPool.

    Example:
        >>> pool = create_dispatcher_pool(PoolConfig(timeout=10.0))
        >>> ...
        >>> await pool.aclose()
    """
    return DispatcherPool(config=config, adapter=adapter)
