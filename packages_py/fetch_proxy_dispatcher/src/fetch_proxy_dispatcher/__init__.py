"""
fetch_proxy_dispatcher - Per-request proxy/direct client selection for httpx.

A DispatcherPool owns long-lived httpx.AsyncClient instances (one direct,
one per proxy URL). resolve_dispatcher() evaluates HTTPS_PROXY/HTTP_PROXY
and NO_PROXY for each destination URL and hands back the matching client.

Example:
    >>> from fetch_proxy_dispatcher import DispatcherPool, resolve_dispatcher
    >>>
    >>> async with DispatcherPool() as pool:
    ...     result = resolve_dispatcher("https://api.example.com/x", pool)
    ...     response = await result.client.get("https://api.example.com/x")
    >>> print(f"Proxy: {result.decision.proxy_url}")

Environment Variables:
    HTTPS_PROXY / HTTP_PROXY (and lowercase variants): forward proxy URL
    NO_PROXY / no_proxy: comma-separated bypass patterns
    NODE_TLS_REJECT_UNAUTHORIZED=0 or SSL_CERT_VERIFY=0: disable TLS verification
    DEBUG: Logging control (set to "false" or "0" to disable, enabled by default)
"""
import logging
import os

__version__ = "1.0.0"


def _is_debug_enabled() -> bool:
    """
    Check if debug logging is enabled.
    Logging is ENABLED by default. Disable with DEBUG=false or DEBUG=0.
    """
    debug = os.environ.get("DEBUG", "").lower()
    if debug in ("false", "0"):
        return False
    return True


def _configure_logging() -> None:
    """Configure package logging based on DEBUG environment variable."""
    package_logger = logging.getLogger("fetch_proxy_dispatcher")

    if _is_debug_enabled():
        package_logger.setLevel(logging.DEBUG)

        # Add handler if none exists (avoid duplicate handlers)
        if not package_logger.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(logging.DEBUG)
            handler.setFormatter(logging.Formatter("[%(name)s] %(message)s"))
            package_logger.addHandler(handler)
    else:
        package_logger.setLevel(logging.WARNING)


# Configure logging on import
_configure_logging()

from .config import (
    get_ca_bundle_from_env,
    get_timeout_from_env,
    is_ssl_verify_disabled_by_env,
)
from .models import DispatcherResult, PoolConfig, ProxyConfig
from .factory import DispatcherPool, create_dispatcher_pool
from .dispatcher import resolve_dispatcher
from .adapters.base import BaseAdapter
from .adapters.adapter_httpx import HttpxAdapter

__all__ = [
    "__version__",
    # Config
    "get_ca_bundle_from_env",
    "get_timeout_from_env",
    "is_ssl_verify_disabled_by_env",
    # Models
    "DispatcherResult",
    "PoolConfig",
    "ProxyConfig",
    # Pool
    "DispatcherPool",
    "create_dispatcher_pool",
    "resolve_dispatcher",
    # Adapters
    "BaseAdapter",
    "HttpxAdapter",
]
