from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class ProxyConfiguration(BaseModel):
    """
    Proxy settings read from the process environment.

    Rebuilt on every resolution so that changes to HTTPS_PROXY / NO_PROXY
    take effect without a restart.
    """
    proxy_url: Optional[str] = None
    no_proxy_patterns: List[str] = Field(default_factory=list)

    @property
    def has_proxy(self) -> bool:
        return bool(self.proxy_url)


class DispatchDecision(BaseModel):
    """Whether a single request goes through the forward proxy or direct."""
    model_config = ConfigDict(frozen=True)

    use_proxy: bool = False
    proxy_url: Optional[str] = None

    @classmethod
    def direct(cls) -> "DispatchDecision":
        return cls(use_proxy=False, proxy_url=None)

    @classmethod
    def via_proxy(cls, proxy_url: str) -> "DispatchDecision":
        return cls(use_proxy=True, proxy_url=proxy_url)
