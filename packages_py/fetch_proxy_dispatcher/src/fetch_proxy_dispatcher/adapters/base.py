"""
Abstract base class for HTTP client adapters.

Defines the interface that all adapters must implement.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict

from ..models import ProxyConfig


class BaseAdapter(ABC):
    """
    Abstract adapter for different HTTP libraries.

    Subclasses build long-lived async clients for a DispatcherPool.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Adapter name (e.g., 'httpx').

        Returns:
            String identifier for this adapter.
        """
        ...

    @abstractmethod
    def create_async_client(self, config: ProxyConfig) -> Any:
        """
        Create an asynchronous HTTP client.

        Args:
            config: Proxy configuration to apply.

        Returns:
            The configured client.
        """
        ...

    @abstractmethod
    def get_proxy_dict(self, config: ProxyConfig) -> Dict[str, Any]:
        """
        Get proxy configuration as dict for manual client creation.

        Args:
            config: Proxy configuration.

        Returns:
            Dictionary of kwargs suitable for the library's client constructor.
        """
        ...
