import os
import logging
from typing import Iterable, List, Optional
from urllib.parse import urlsplit

from .errors import ConfigurationError
from .types import DispatchDecision, ProxyConfiguration

logger = logging.getLogger("fetch_proxy_config")

# Checked in order; the first non-empty value wins.
PROXY_ENV_VARS = ("HTTPS_PROXY", "HTTP_PROXY", "https_proxy", "http_proxy")
NO_PROXY_ENV_VARS = ("NO_PROXY", "no_proxy")


def mask_proxy_url(url: Optional[str]) -> str:
    """Mask proxy URL for safe logging (hide credentials if present)."""
    if not url:
        return "None"
    if "@" in url:
        protocol_end = url.find("://")
        if protocol_end != -1:
            at_pos = url.rfind("@")
            return f"{url[:protocol_end + 3]}***@{url[at_pos + 1:]}"
    return url


def _first_env(names: Iterable[str]) -> Optional[str]:
    for name in names:
        value = os.environ.get(name)
        if value:
            return value
    return None


def resolve_proxy_url() -> Optional[str]:
    """
    Resolve the forward proxy URL from the environment.

    Precedence:
    1. HTTPS_PROXY
    2. HTTP_PROXY
    3. https_proxy
    4. http_proxy

    Returns:
        Proxy URL or None if no proxy is configured.
    """
    proxy_url = _first_env(PROXY_ENV_VARS)
    logger.debug(f"resolve_proxy_url: result={mask_proxy_url(proxy_url)}")
    return proxy_url


def parse_no_proxy(raw: Optional[str]) -> List[str]:
    """
    Split a NO_PROXY value into patterns.

    Entries are trimmed and empty entries dropped; case and order are kept.
    """
    if not raw:
        return []
    return [entry.strip() for entry in raw.split(",") if entry.strip()]


def load_proxy_configuration() -> ProxyConfiguration:
    """Read proxy URL and no-proxy patterns from the current environment."""
    return ProxyConfiguration(
        proxy_url=resolve_proxy_url(),
        no_proxy_patterns=parse_no_proxy(_first_env(NO_PROXY_ENV_VARS)),
    )


def should_bypass_proxy(hostname: str, patterns: Iterable[str]) -> bool:
    """
    Check a hostname against no-proxy patterns.

    - "*" matches every host
    - ".example.com" matches example.com and any subdomain of it
    - anything else must equal the hostname exactly
    """
    for pattern in patterns:
        if pattern == "*":
            return True
        if pattern.startswith("."):
            if hostname == pattern[1:] or hostname.endswith(pattern):
                return True
        elif hostname == pattern:
            return True
    return False


def extract_hostname(url: str) -> str:
    """
    Extract the hostname of an absolute URL.

    Raises:
        ConfigurationError: If the URL is empty, has no scheme or no host.
    """
    if not url:
        raise ConfigurationError("Cannot evaluate NO_PROXY rules for an empty URL", url=url)
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
    except ValueError as e:
        raise ConfigurationError(f"Cannot parse URL: {e}", url=url) from e
    if not parts.scheme or not hostname:
        raise ConfigurationError("URL is not absolute (missing scheme or host)", url=url)
    return hostname


def decide_dispatch(
    url: str,
    configuration: Optional[ProxyConfiguration] = None,
) -> DispatchDecision:
    """
    Decide whether a request to `url` goes through the proxy.

    The environment is read on every call unless `configuration` is given.
    A URL that cannot be evaluated against NO_PROXY is logged and routed
    through the proxy.
    """
    config = configuration if configuration is not None else load_proxy_configuration()

    if not config.proxy_url:
        logger.debug(f"decide_dispatch: no proxy configured, direct for {url!r}")
        return DispatchDecision.direct()

    if not config.no_proxy_patterns:
        logger.debug(
            f"decide_dispatch: no NO_PROXY rules, proxy={mask_proxy_url(config.proxy_url)} for {url!r}"
        )
        return DispatchDecision.via_proxy(config.proxy_url)

    try:
        hostname = extract_hostname(url)
    except ConfigurationError as e:
        logger.warning(
            f"decide_dispatch: Error checking NO_PROXY rules: {e}. "
            f"Falling back to proxy={mask_proxy_url(config.proxy_url)}"
        )
        return DispatchDecision.via_proxy(config.proxy_url)

    if should_bypass_proxy(hostname, config.no_proxy_patterns):
        logger.debug(f"decide_dispatch: host={hostname!r} matched NO_PROXY, direct")
        return DispatchDecision.direct()

    logger.debug(f"decide_dispatch: host={hostname!r} via proxy={mask_proxy_url(config.proxy_url)}")
    return DispatchDecision.via_proxy(config.proxy_url)
