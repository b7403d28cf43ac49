"""
Credential stores
"""
from .memory import MemoryCredentialStore, create_memory_store
from .redis import RedisClientProtocol, RedisCredentialStore, create_redis_store

__all__ = [
    "MemoryCredentialStore",
    "create_memory_store",
    "RedisClientProtocol",
    "RedisCredentialStore",
    "create_redis_store",
]
