"""
Wiring of configured collaborators.
"""
from typing import Optional

from credential_store import RedisCredentialStore
from fetch_proxy_dispatcher import DispatcherPool
from figma_client import FigmaService

from .config import ServerConfig


def create_credential_store(config: ServerConfig) -> Optional[RedisCredentialStore]:
    """Redis-backed session store, or None when Redis is not configured."""
    if config.redis is None:
        return None
    return RedisCredentialStore(config.redis)


def create_figma_service(
    config: ServerConfig,
    pool: Optional[DispatcherPool] = None,
) -> FigmaService:
    """
    Build a FigmaService from the configuration.

    The caller closes the service and disconnects `service.store` when set.
    """
    return FigmaService(
        config.auth,
        pool=pool,
        store=create_credential_store(config),
        fallback_config=config.fallback,
        log_dir=config.log_dir,
    )
