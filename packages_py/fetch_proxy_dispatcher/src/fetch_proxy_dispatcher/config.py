"""
Environment switches for TLS verification and client timeouts.
"""
import logging
import os
from typing import Optional

logger = logging.getLogger("fetch_proxy_dispatcher.config")

DEFAULT_TIMEOUT_SECONDS = 30.0


def is_ssl_verify_disabled_by_env() -> bool:
    """
    Check if SSL verification is disabled via environment variables.

    Returns True if any of these are set:
    - NODE_TLS_REJECT_UNAUTHORIZED=0
    - SSL_CERT_VERIFY=0
    """
    node_tls = os.environ.get("NODE_TLS_REJECT_UNAUTHORIZED", "")
    ssl_cert_verify = os.environ.get("SSL_CERT_VERIFY", "")
    result = node_tls == "0" or ssl_cert_verify == "0"
    logger.debug(
        f"is_ssl_verify_disabled_by_env: NODE_TLS_REJECT_UNAUTHORIZED={node_tls!r}, "
        f"SSL_CERT_VERIFY={ssl_cert_verify!r}, result={result}"
    )
    return result


def get_ca_bundle_from_env() -> Optional[str]:
    """CA bundle path from SSL_CERT_FILE or REQUESTS_CA_BUNDLE, if set."""
    return os.environ.get("SSL_CERT_FILE") or os.environ.get("REQUESTS_CA_BUNDLE") or None


def get_timeout_from_env(default: float = DEFAULT_TIMEOUT_SECONDS) -> float:
    """
    Read FETCH_TIMEOUT_SECONDS.

    Invalid values are logged and the default is used.
    """
    raw = os.environ.get("FETCH_TIMEOUT_SECONDS", "")
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"get_timeout_from_env: invalid FETCH_TIMEOUT_SECONDS={raw!r}, using {default}")
        return default
    if value <= 0:
        logger.warning(f"get_timeout_from_env: non-positive FETCH_TIMEOUT_SECONDS={raw!r}, using {default}")
        return default
    return value
