"""
Error hierarchy for fetch_fallback.

Every error carries the target URL and the attempt that produced it.
"""
from typing import Any, Dict, Optional

from fetch_proxy_config import ConfigurationError

from .types import Attempt


class FetchError(Exception):
    """Base class for failures of a fetch_json call."""

    def __init__(
        self,
        message: str,
        *,
        url: str,
        attempt: Attempt = Attempt.PRIMARY,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.url = url
        self.attempt = attempt
        self.fallback_error: Optional[Exception] = None

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "kind": type(self).__name__,
            "message": self.message,
            "url": self.url,
            "attempt": self.attempt.value,
        }
        if self.fallback_error is not None:
            result["fallback_error"] = str(self.fallback_error)
        return result


class NetworkError(FetchError):
    """The primary transport could not complete the request."""


class HttpStatusError(FetchError):
    """A response was received with a non-2xx status."""

    def __init__(
        self,
        status_code: int,
        status_text: str,
        *,
        url: str,
        attempt: Attempt = Attempt.PRIMARY,
    ) -> None:
        super().__init__(
            f"Fetch failed with status {status_code}: {status_text}",
            url=url,
            attempt=attempt,
        )
        self.status_code = status_code
        self.status_text = status_text


class JsonParseError(FetchError):
    """The response body was not valid JSON."""


class FallbackProcessError(FetchError):
    """The external HTTP client failed or produced unusable output."""

    def __init__(
        self,
        message: str,
        *,
        url: str,
        returncode: Optional[int] = None,
        stderr: Optional[str] = None,
    ) -> None:
        super().__init__(message, url=url, attempt=Attempt.FALLBACK)
        self.returncode = returncode
        self.stderr = stderr


__all__ = [
    "ConfigurationError",
    "FetchError",
    "NetworkError",
    "HttpStatusError",
    "JsonParseError",
    "FallbackProcessError",
]
