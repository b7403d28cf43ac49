"""
HTTP client adapters for fetch_proxy_dispatcher.
"""
from .base import BaseAdapter
from .adapter_httpx import HttpxAdapter

__all__ = [
    "BaseAdapter",
    "HttpxAdapter",
]
