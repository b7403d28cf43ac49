"""
Utilities for resolving proxy configuration and NO_PROXY bypass rules.
"""
from .errors import ConfigurationError
from .resolver import (
    decide_dispatch,
    extract_hostname,
    load_proxy_configuration,
    mask_proxy_url,
    parse_no_proxy,
    resolve_proxy_url,
    should_bypass_proxy,
)
from .types import DispatchDecision, ProxyConfiguration

__all__ = [
    "ConfigurationError",
    "DispatchDecision",
    "ProxyConfiguration",
    "decide_dispatch",
    "extract_hostname",
    "load_proxy_configuration",
    "mask_proxy_url",
    "parse_no_proxy",
    "resolve_proxy_url",
    "should_bypass_proxy",
]
