"""
Configuration dataclasses for fetch_proxy_dispatcher.

Uses standard library dataclasses for configuration models.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union, TYPE_CHECKING

from fetch_proxy_config import DispatchDecision

if TYPE_CHECKING:
    import httpx


@dataclass
class ProxyConfig:
    """Settings for one underlying client (direct or proxied)."""
    proxy_url: Optional[str] = None
    verify_ssl: bool = True
    timeout: float = 30.0
    trust_env: bool = False  # We handle env ourselves
    cert: Optional[Union[str, tuple]] = None  # Client cert: path or (cert, key) tuple
    ca_bundle: Optional[str] = None  # CA bundle path for SSL verification


@dataclass
class PoolConfig:
    """Configuration shared by every client a DispatcherPool creates."""
    timeout: float = 30.0
    verify_ssl: Optional[bool] = None  # None = verify unless disabled by env
    cert: Optional[Union[str, tuple]] = None
    ca_bundle: Optional[str] = None


@dataclass
class DispatcherResult:
    """
    Client selected for one request.

    Attributes:
        client: Shared httpx.AsyncClient owned by the pool (do not close it)
        decision: The direct/proxy decision that selected the client
        proxy_dict: Kwargs the client was built with
    """
    client: "httpx.AsyncClient"
    decision: DispatchDecision
    proxy_dict: Dict[str, Any]

    @property
    def is_direct(self) -> bool:
        return not self.decision.use_proxy
