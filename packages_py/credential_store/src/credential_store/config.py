"""
Redis connection configuration
"""
import logging
import os
from typing import Optional
from urllib.parse import quote, urlsplit, urlunsplit

from pydantic import BaseModel, Field

from fetch_proxy_config import ConfigurationError

logger = logging.getLogger("credential_store.config")

DEFAULT_REDIS_HOST = "localhost"
DEFAULT_REDIS_PORT = 6379
TLS_PORTS = frozenset({6380, 25061})


def mask_secret(value: Optional[str], visible_chars: int = 6) -> str:
    """Mask sensitive values for safe logging."""
    if value is None:
        return "<None>"
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


def mask_redis_url(url: str) -> str:
    """Replace the password in a redis:// URL with ***."""
    parts = urlsplit(url)
    if not parts.password:
        return url
    netloc = parts.netloc.rsplit("@", 1)[1]
    return urlunsplit(parts._replace(netloc=f"{parts.username or ''}:***@{netloc}"))


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"Invalid {name} value: {raw!r}") from e


class RedisConfig(BaseModel):
    """
    Single-node Redis connection settings.

    Either `url` is set (used as-is) or the URL is built from the
    individual components.
    """

    host: str = DEFAULT_REDIS_HOST
    port: int = DEFAULT_REDIS_PORT
    db: int = 0
    username: Optional[str] = None
    password: Optional[str] = Field(default=None, repr=False)
    tls: bool = False
    url: Optional[str] = Field(default=None, repr=False)

    @property
    def connection_url(self) -> str:
        if self.url:
            return self.url

        scheme = "rediss" if self.tls or self.port in TLS_PORTS else "redis"
        auth = ""
        if self.password:
            user = quote(self.username, safe="") if self.username else ""
            auth = f"{user}:{quote(self.password, safe='')}@"
        return f"{scheme}://{auth}{self.host}:{self.port}/{self.db}"

    @property
    def masked_url(self) -> str:
        return mask_redis_url(self.connection_url)

    @classmethod
    def from_env(cls) -> "RedisConfig":
        """
        Build a RedisConfig from the environment.

        Environment Variables:
            REDIS_URL: Full Redis connection URL (takes precedence)
            REDIS_HOST: Redis host (default: localhost)
            REDIS_PORT: Redis port (default: 6379)
            REDIS_DB: Redis database number (default: 0)
            REDIS_USERNAME: Redis username (optional)
            REDIS_PASSWORD: Redis password (optional)
            REDIS_TLS: true to force rediss:// (also implied by ports 6380/25061)

        Raises:
            ConfigurationError: If a numeric value cannot be parsed.
        """
        config = cls(
            host=os.getenv("REDIS_HOST") or DEFAULT_REDIS_HOST,
            port=_int_from_env("REDIS_PORT", DEFAULT_REDIS_PORT),
            db=_int_from_env("REDIS_DB", 0),
            username=os.getenv("REDIS_USERNAME") or None,
            password=os.getenv("REDIS_PASSWORD") or None,
            tls=os.getenv("REDIS_TLS", "").lower() in ("true", "1", "yes"),
            url=os.getenv("REDIS_URL") or None,
        )
        logger.debug(
            f"RedisConfig.from_env: url={config.masked_url}, "
            f"source={'REDIS_URL' if config.url else 'components'}"
        )
        return config
