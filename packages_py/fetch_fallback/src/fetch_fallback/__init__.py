"""
fetch_fallback - JSON fetch with a single curl fallback.

The primary attempt goes through httpx (direct or proxied, chosen per URL by
fetch_proxy_dispatcher). If it fails for any reason, the same GET is replayed
once through curl, which often succeeds behind TLS-intercepting corporate
proxies. If curl fails too, the ORIGINAL primary error is raised.

Example:
    >>> from fetch_fallback import fetch_json, RequestOptions
    >>> from fetch_proxy_dispatcher import DispatcherPool
    >>>
    >>> async with DispatcherPool() as pool:
    ...     data = await fetch_json(
    ...         "https://api.figma.com/v1/files/abc",
    ...         RequestOptions(headers={"X-Figma-Token": token}),
    ...         pool=pool,
    ...     )

Environment Variables:
    FETCH_FALLBACK_ENABLED: "false"/"0" disables the curl fallback
    FETCH_FALLBACK_CURL_BIN: curl executable (default: curl)
    FETCH_DEADLINE_SECONDS: combined budget for both attempts
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
    package_logger = logging.getLogger("fetch_fallback")

    if _is_debug_enabled():
        package_logger.setLevel(logging.DEBUG)

        if not package_logger.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(logging.DEBUG)
            handler.setFormatter(logging.Formatter("[%(name)s] %(message)s"))
            package_logger.addHandler(handler)
    else:
        package_logger.setLevel(logging.WARNING)


_configure_logging()

from .types import (
    Attempt,
    EventType,
    FallbackConfig,
    FetchEvent,
    FetchEventListener,
    FetchFailure,
    FetchOutcome,
    FetchSuccess,
    ProcessResult,
    RequestOptions,
)
from .errors import (
    ConfigurationError,
    FallbackProcessError,
    FetchError,
    HttpStatusError,
    JsonParseError,
    NetworkError,
)
from .config import (
    CURL_BASE_ARGS,
    DEFAULT_FALLBACK_CONFIG,
    build_curl_args,
    format_headers_for_curl,
    interpret_fallback_output,
    load_fallback_config,
    mask_headers,
    merge_config,
)
from .runner import CurlRunner, ExternalHttpRunner
from .executor import FallbackExecutor, create_fallback_executor, fetch_json

__all__ = [
    "__version__",
    # Types
    "Attempt",
    "EventType",
    "FallbackConfig",
    "FetchEvent",
    "FetchEventListener",
    "FetchFailure",
    "FetchOutcome",
    "FetchSuccess",
    "ProcessResult",
    "RequestOptions",
    # Errors
    "ConfigurationError",
    "FallbackProcessError",
    "FetchError",
    "HttpStatusError",
    "JsonParseError",
    "NetworkError",
    # Config
    "CURL_BASE_ARGS",
    "DEFAULT_FALLBACK_CONFIG",
    "build_curl_args",
    "format_headers_for_curl",
    "interpret_fallback_output",
    "load_fallback_config",
    "mask_headers",
    "merge_config",
    # Runner
    "CurlRunner",
    "ExternalHttpRunner",
    # Executor
    "FallbackExecutor",
    "create_fallback_executor",
    "fetch_json",
]
