"""
Tests for FigmaAuthResolver.
"""
import logging
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from credential_store import MemoryCredentialStore, RedisConfig, RedisCredentialStore
from figma_client import FigmaAuthError, FigmaAuthOptions, FigmaAuthResolver


class TestFigmaAuthResolver:

    @pytest.mark.asyncio
    async def test_oauth_bearer(self):
        resolver = FigmaAuthResolver(FigmaAuthOptions(
            figma_api_key="figd_key", figma_oauth_token="oauth-tok", use_oauth=True,
        ))
        assert resolver.uses_oauth
        assert await resolver.headers() == {"Authorization": "Bearer oauth-tok"}

    @pytest.mark.asyncio
    async def test_oauth_flag_without_token_uses_api_key(self):
        resolver = FigmaAuthResolver(FigmaAuthOptions(figma_api_key="figd_key", use_oauth=True))
        assert not resolver.uses_oauth
        assert await resolver.headers() == {"X-Figma-Token": "figd_key"}

    @pytest.mark.asyncio
    async def test_session_key_from_store(self):
        store = MemoryCredentialStore({"hash-1": "figd_session"})
        resolver = FigmaAuthResolver(FigmaAuthOptions(figma_api_key="figd_static"), store)
        assert await resolver.headers("hash-1") == {"X-Figma-Token": "figd_session"}

    @pytest.mark.asyncio
    async def test_store_miss_falls_back_to_static_key(self):
        resolver = FigmaAuthResolver(FigmaAuthOptions(figma_api_key="figd_static"), MemoryCredentialStore())
        assert await resolver.headers("unknown") == {"X-Figma-Token": "figd_static"}

    @pytest.mark.asyncio
    async def test_store_error_is_logged_and_falls_back(self, caplog):
        caplog.set_level(logging.ERROR, logger="figma_client")
        store = AsyncMock()
        store.get.side_effect = RedisConnectionError("down")
        resolver = FigmaAuthResolver(FigmaAuthOptions(figma_api_key="figd_static"), store)

        assert await resolver.headers("hash-1") == {"X-Figma-Token": "figd_static"}
        assert "Error retrieving API key" in caplog.text

    @pytest.mark.asyncio
    async def test_unexpected_store_error_falls_back(self):
        store = AsyncMock()
        store.get.side_effect = ValueError("bad payload")
        resolver = FigmaAuthResolver(FigmaAuthOptions(figma_api_key="figd_static"), store)

        assert await resolver.headers("hash-1") == {"X-Figma-Token": "figd_static"}

    @pytest.mark.asyncio
    async def test_malformed_redis_url_falls_back(self, caplog):
        caplog.set_level(logging.ERROR, logger="figma_client")
        store = RedisCredentialStore(RedisConfig(url="localhost:6379"))
        resolver = FigmaAuthResolver(FigmaAuthOptions(figma_api_key="figd_static"), store)

        assert await resolver.headers("hash-1") == {"X-Figma-Token": "figd_static"}
        assert "Error retrieving API key" in caplog.text

    @pytest.mark.asyncio
    async def test_no_key_raises(self):
        resolver = FigmaAuthResolver(FigmaAuthOptions(), MemoryCredentialStore())
        with pytest.raises(FigmaAuthError):
            await resolver.headers("missing")

    def test_options_repr_hides_secrets(self):
        assert "figd_secret" not in repr(FigmaAuthOptions(figma_api_key="figd_secret"))
