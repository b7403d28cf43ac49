"""
httpx adapter implementation.
"""
import logging
from typing import Any, Dict

import httpx

from fetch_proxy_config import mask_proxy_url

from .base import BaseAdapter
from ..models import ProxyConfig
from ..config import is_ssl_verify_disabled_by_env

logger = logging.getLogger("fetch_proxy_dispatcher.adapters.httpx")


class HttpxAdapter(BaseAdapter):
    """httpx adapter producing httpx.AsyncClient instances."""

    @property
    def name(self) -> str:
        return "httpx"

    def _build_kwargs(self, config: ProxyConfig) -> Dict[str, Any]:
        """
        Build kwargs for httpx.AsyncClient.

        Args:
            config: Proxy configuration.

        Returns:
            Dictionary of kwargs for httpx client constructor.
        """
        kwargs: Dict[str, Any] = {
            "timeout": httpx.Timeout(config.timeout),
            "follow_redirects": True,
            "trust_env": config.trust_env,
        }

        if config.proxy_url:
            kwargs["proxy"] = config.proxy_url

        # SSL verification - env vars > ca_bundle path > verify_ssl setting
        if is_ssl_verify_disabled_by_env():
            kwargs["verify"] = False
        else:
            kwargs["verify"] = config.ca_bundle if config.ca_bundle else config.verify_ssl

        if config.cert:
            kwargs["cert"] = config.cert

        logger.debug(
            f"_build_kwargs: timeout={config.timeout}, trust_env={kwargs['trust_env']}, "
            f"proxy={mask_proxy_url(kwargs.get('proxy'))}, verify={kwargs['verify']}, "
            f"cert={kwargs.get('cert') is not None}"
        )
        return kwargs

    def create_async_client(self, config: ProxyConfig) -> httpx.AsyncClient:
        """Create an httpx.AsyncClient."""
        kwargs = self._build_kwargs(config)
        logger.debug(f"create_async_client: proxy={mask_proxy_url(config.proxy_url)}")
        return httpx.AsyncClient(**kwargs)

    def get_proxy_dict(self, config: ProxyConfig) -> Dict[str, Any]:
        return self._build_kwargs(config)
