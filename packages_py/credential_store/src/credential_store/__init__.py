"""
credential_store - Per-session credential lookup backed by Redis.

Example:
    >>> from credential_store import RedisCredentialStore, RedisConfig
    >>>
    >>> store = RedisCredentialStore(RedisConfig.from_env())
    >>> api_key = await store.get(session_hash)
    >>> await store.disconnect()
"""
from .types import CredentialStore
from .config import RedisConfig, mask_redis_url, mask_secret
from .stores import (
    MemoryCredentialStore,
    RedisClientProtocol,
    RedisCredentialStore,
    create_memory_store,
    create_redis_store,
)

__all__ = [
    "CredentialStore",
    "RedisConfig",
    "mask_redis_url",
    "mask_secret",
    "MemoryCredentialStore",
    "RedisClientProtocol",
    "RedisCredentialStore",
    "create_memory_store",
    "create_redis_store",
]

__version__ = "1.0.0"
