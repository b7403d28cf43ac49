"""
Configuration utilities for fetch_fallback
"""
import json
import logging
import os
from typing import Any, Dict, List, Mapping, Optional

from fetch_proxy_config import ConfigurationError

from .errors import FallbackProcessError, JsonParseError
from .types import Attempt, FallbackConfig, ProcessResult

logger = logging.getLogger("fetch_fallback.config")


# Default fallback configuration
DEFAULT_FALLBACK_CONFIG = FallbackConfig(
    enabled=True,
    curl_binary="curl",
    deadline_seconds=None,
    error_keywords=("error", "fail"),
)

# -s: no progress bar on stderr
# -S: still show errors on stderr
# --fail-with-body: exit 22 on HTTP errors but keep the response body
# -L: follow redirects
CURL_BASE_ARGS = ("-s", "-S", "--fail-with-body", "-L")

SENSITIVE_HEADERS = frozenset({"authorization", "x-figma-token", "x-api-key", "proxy-authorization"})

_TRUTHY = ("true", "1", "yes")
_FALSY = ("false", "0", "no")


def merge_config(config: Optional[FallbackConfig] = None) -> FallbackConfig:
    """Return `config` or a copy of the defaults."""
    if config is None:
        return FallbackConfig(
            enabled=DEFAULT_FALLBACK_CONFIG.enabled,
            curl_binary=DEFAULT_FALLBACK_CONFIG.curl_binary,
            deadline_seconds=DEFAULT_FALLBACK_CONFIG.deadline_seconds,
            error_keywords=DEFAULT_FALLBACK_CONFIG.error_keywords,
        )
    return config


def load_fallback_config() -> FallbackConfig:
    """
    Build a FallbackConfig from the environment.

    Environment Variables:
        FETCH_FALLBACK_ENABLED: true/false (default: true)
        FETCH_FALLBACK_CURL_BIN: curl executable (default: curl)
        FETCH_DEADLINE_SECONDS: combined primary + fallback budget (default: none)

    Raises:
        ConfigurationError: If a value cannot be parsed.
    """
    config = merge_config()

    enabled_raw = os.environ.get("FETCH_FALLBACK_ENABLED", "").strip().lower()
    if enabled_raw:
        if enabled_raw in _TRUTHY:
            config.enabled = True
        elif enabled_raw in _FALSY:
            config.enabled = False
        else:
            raise ConfigurationError(f"Invalid FETCH_FALLBACK_ENABLED value: {enabled_raw!r}")

    curl_binary = os.environ.get("FETCH_FALLBACK_CURL_BIN", "").strip()
    if curl_binary:
        config.curl_binary = curl_binary

    deadline_raw = os.environ.get("FETCH_DEADLINE_SECONDS", "").strip()
    if deadline_raw:
        try:
            deadline = float(deadline_raw)
        except ValueError as e:
            raise ConfigurationError(f"Invalid FETCH_DEADLINE_SECONDS value: {deadline_raw!r}") from e
        if deadline <= 0:
            raise ConfigurationError(f"FETCH_DEADLINE_SECONDS must be positive, got {deadline_raw!r}")
        config.deadline_seconds = deadline

    logger.debug(
        f"load_fallback_config: enabled={config.enabled}, curl_binary={config.curl_binary!r}, "
        f"deadline_seconds={config.deadline_seconds}"
    )
    return config


def mask_header_value(name: str, value: str) -> str:
    """Mask credentials in header values for logging."""
    if name.lower() not in SENSITIVE_HEADERS:
        return value
    if len(value) <= 4:
        return "****"
    return f"{value[:4]}****"


def mask_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    return {name: mask_header_value(name, value) for name, value in headers.items()}


def format_headers_for_curl(headers: Optional[Mapping[str, str]], url: str = "") -> List[str]:
    """
    Convert headers into "Name: value" strings, one per curl -H argument.

    Raises:
        FallbackProcessError: If a header contains CR or LF.
    """
    if not headers:
        return []

    formatted = []
    for name, value in headers.items():
        if any(ch in name for ch in "\r\n:") or any(ch in value for ch in "\r\n"):
            raise FallbackProcessError(
                f"Refusing to pass header {name!r} to curl: contains a line break or invalid character",
                url=url,
            )
        formatted.append(f"{name}: {value}")
    return formatted


def build_curl_args(
    url: str,
    headers: Optional[Mapping[str, str]] = None,
    curl_binary: str = "curl",
) -> List[str]:
    """
    Build the argument vector for the curl fallback.

    The URL is passed with --url so a value starting with "-" cannot be
    read as an option. The result is executed without a shell.
    """
    args = [curl_binary, *CURL_BASE_ARGS]
    for header in format_headers_for_curl(headers, url):
        args.extend(["-H", header])
    args.extend(["--url", url])
    return args


def interpret_fallback_output(
    result: ProcessResult,
    url: str,
    error_keywords: tuple = DEFAULT_FALLBACK_CONFIG.error_keywords,
) -> Any:
    """
    Turn captured curl output into parsed JSON.

    stderr only counts as a failure when stdout is empty or stderr mentions
    an error keyword; otherwise it is logged as informational output.

    Raises:
        FallbackProcessError: Non-zero exit, failing stderr or empty stdout.
        JsonParseError: stdout is not valid JSON.
    """
    stdout = result.stdout
    stderr = result.stderr

    if result.returncode != 0:
        detail = f": {stderr.strip()}" if stderr.strip() else ""
        raise FallbackProcessError(
            f"Curl command exited with status {result.returncode}{detail}",
            url=url,
            returncode=result.returncode,
            stderr=stderr,
        )

    if stderr:
        lowered = stderr.lower()
        if not stdout or any(keyword in lowered for keyword in error_keywords):
            raise FallbackProcessError(
                f"Curl command failed with stderr: {stderr.strip()}",
                url=url,
                returncode=result.returncode,
                stderr=stderr,
            )
        logger.info(
            f"[fetch_json] Curl command for {url} produced stderr (but might be informational): {stderr.strip()}"
        )

    if not stdout.strip():
        raise FallbackProcessError("Curl command returned empty stdout.", url=url, returncode=result.returncode)

    try:
        return json.loads(stdout)
    except ValueError as e:
        raise JsonParseError(
            f"Fallback response is not valid JSON: {e}",
            url=url,
            attempt=Attempt.FALLBACK,
        ) from e
