"""
Type definitions for fetch_fallback
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Literal, Optional, Union, TYPE_CHECKING

if TYPE_CHECKING:
    import httpx
    from .errors import FetchError


@dataclass
class FallbackConfig:
    """Fallback configuration"""

    enabled: bool = True
    """Whether to retry through the external HTTP client after a primary failure. Default: True"""

    curl_binary: str = "curl"
    """Executable used for the fallback request. Default: curl"""

    deadline_seconds: Optional[float] = None
    """Combined budget for primary + fallback (seconds). Default: None (no deadline)"""

    error_keywords: tuple = ("error", "fail")
    """Case-insensitive stderr substrings that mark the fallback as failed"""


class Attempt(str, Enum):
    """Which transport path produced an outcome"""
    PRIMARY = "primary"
    FALLBACK = "fallback"


@dataclass
class RequestOptions:
    """Options for a single fetch_json call"""

    method: str = "GET"
    """HTTP method used by the primary transport. The fallback always issues a GET."""

    headers: Dict[str, str] = field(default_factory=dict)
    """Plain string-to-string headers. Serialized into curl arguments by the fallback."""

    body: Optional[bytes] = None
    """Optional request body for the primary transport"""

    client: Optional["httpx.AsyncClient"] = None
    """Explicit client; takes precedence over the resolved dispatcher"""

    timeout: Optional[float] = None
    """Primary request timeout (seconds). None = client default"""

    def __post_init__(self) -> None:
        if self.headers is None:
            self.headers = {}
        if not isinstance(self.headers, dict):
            raise TypeError(
                f"headers must be a plain dict of str to str, got {type(self.headers).__name__}"
            )
        for key, value in self.headers.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise TypeError(
                    f"headers must map str to str, got {type(key).__name__} -> {type(value).__name__}"
                )
        self.method = self.method.upper()


@dataclass
class ProcessResult:
    """Captured output of the external HTTP client"""

    stdout: str
    stderr: str
    returncode: int = 0


@dataclass
class FetchSuccess:
    """Parsed JSON returned by one of the two attempts"""

    value: Any
    attempt: Attempt

    @property
    def ok(self) -> bool:
        return True


@dataclass
class FetchFailure:
    """
    Failure surfaced to the caller.

    `error` is the primary error whenever the primary attempt failed;
    the fallback's own error, if any, is kept as diagnostic context.
    """

    error: "FetchError"
    attempt: Attempt
    fallback_error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return False

    @property
    def kind(self) -> str:
        return type(self.error).__name__

    @property
    def message(self) -> str:
        return self.error.message


FetchOutcome = Union[FetchSuccess, FetchFailure]


EventType = Literal[
    "attempt:start",
    "attempt:success",
    "attempt:fail",
    "fallback:skip",
]


@dataclass
class FetchEvent:
    """Event emitted by the fallback executor"""

    type: EventType
    attempt: Attempt
    data: Dict[str, Any] = field(default_factory=dict)


FetchEventListener = Callable[[FetchEvent], None]
