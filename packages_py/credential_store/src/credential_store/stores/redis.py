"""
Redis credential store implementation
"""
import logging
from typing import Any, Optional, Protocol

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from ..config import RedisConfig, mask_secret
from ..types import CredentialStore

logger = logging.getLogger("credential_store.redis")


class RedisClientProtocol(Protocol):
    """Protocol for Redis client (compatible with redis-py async)"""

    async def ping(self) -> Any:
        ...

    async def get(self, name: str) -> Any:
        ...

    async def aclose(self) -> None:
        ...


class RedisCredentialStore(CredentialStore):
    """
    Redis implementation of CredentialStore.

    Values are stored as plain strings under the session hash. The
    connection is opened lazily on the first lookup.
    """

    def __init__(
        self,
        config: Optional[RedisConfig] = None,
        client: Optional[RedisClientProtocol] = None,
    ) -> None:
        """
        Create a new RedisCredentialStore.

        Args:
            config: Connection settings. Default: RedisConfig.from_env()
            client: Pre-built async client (not closed by disconnect())
        """
        self._config = config or RedisConfig.from_env()
        self._client = client
        self._owns_client = client is None
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def config(self) -> RedisConfig:
        return self._config

    async def connect(self) -> None:
        if self._connected:
            return

        try:
            if self._client is None:
                self._client = aioredis.from_url(self._config.connection_url, decode_responses=True)
            await self._client.ping()
        except (RedisError, OSError, ValueError) as e:
            logger.error(
                f"RedisCredentialStore.connect: Failed to connect to {self._config.masked_url}: "
                f"{type(e).__name__}: {e}"
            )
            await self._discard_owned_client()
            raise

        self._connected = True
        logger.info(f"RedisCredentialStore.connect: Connected to {self._config.masked_url}")

    async def _discard_owned_client(self) -> None:
        """Drop a client created by connect() so the next call builds a fresh one."""
        if not self._owns_client or self._client is None:
            return
        client, self._client = self._client, None
        try:
            await client.aclose()
        except (RedisError, OSError) as e:
            logger.warning(f"RedisCredentialStore.connect: Error closing failed client: {type(e).__name__}: {e}")

    async def disconnect(self) -> None:
        if not self._connected:
            return

        self._connected = False
        if not self._owns_client:
            return

        client, self._client = self._client, None
        try:
            await client.aclose()
        except (RedisError, OSError) as e:
            logger.error(f"RedisCredentialStore.disconnect: {type(e).__name__}: {e}")
            raise
        logger.info("RedisCredentialStore.disconnect: Disconnected from Redis")

    async def get(self, key: str) -> Optional[str]:
        if not self._connected:
            await self.connect()

        masked_key = mask_secret(key)
        logger.debug(f"RedisCredentialStore.get: Retrieving credential for key {masked_key}")

        try:
            value = await self._client.get(key)
        except (RedisError, OSError) as e:
            logger.error(
                f"RedisCredentialStore.get: Error retrieving key {masked_key}: {type(e).__name__}: {e}"
            )
            raise

        if value is None:
            logger.info(f"RedisCredentialStore.get: No credential found for key {masked_key}")
            return None

        if isinstance(value, bytes):
            value = value.decode("utf-8")
        logger.debug(f"RedisCredentialStore.get: Found credential for key {masked_key}")
        return value


def create_redis_store(
    config: Optional[RedisConfig] = None,
    client: Optional[RedisClientProtocol] = None,
) -> RedisCredentialStore:
    """Create a new RedisCredentialStore instance."""
    return RedisCredentialStore(config, client)
