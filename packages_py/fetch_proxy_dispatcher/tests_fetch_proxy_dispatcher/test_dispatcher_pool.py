"""
Tests for DispatcherPool and resolve_dispatcher.
"""
import os
from unittest import mock

import httpx
import pytest
import pytest_asyncio

from fetch_proxy_config import DispatchDecision
from fetch_proxy_dispatcher import (
    DispatcherPool,
    HttpxAdapter,
    PoolConfig,
    ProxyConfig,
    create_dispatcher_pool,
    resolve_dispatcher,
)


@pytest.fixture
def clean_env():
    with mock.patch.dict(os.environ, {}, clear=True):
        yield


@pytest_asyncio.fixture
async def pool():
    pool = DispatcherPool(PoolConfig(timeout=5.0))
    yield pool
    await pool.aclose()


class TestResolveDispatcher:

    @pytest.mark.asyncio
    async def test_direct_when_no_proxy(self, clean_env, pool):
        result = resolve_dispatcher("https://api.example.com/x", pool)
        assert result.is_direct
        assert isinstance(result.client, httpx.AsyncClient)
        assert "proxy" not in result.proxy_dict

    @pytest.mark.asyncio
    async def test_routes_via_proxy(self, clean_env, pool):
        with mock.patch.dict(os.environ, {"HTTPS_PROXY": "http://proxy.local:8080"}):
            result = resolve_dispatcher("https://api.other.com/x", pool)
        assert result.decision.use_proxy is True
        assert result.proxy_dict["proxy"] == "http://proxy.local:8080"
        assert pool.proxy_urls == ["http://proxy.local:8080"]

    @pytest.mark.asyncio
    async def test_no_proxy_bypass_uses_direct_client(self, clean_env, pool):
        with mock.patch.dict(os.environ, {
            "HTTPS_PROXY": "http://proxy.local:8080",
            "NO_PROXY": ".example.com",
        }):
            result = resolve_dispatcher("https://sub.example.com/x", pool)
        assert result.is_direct
        assert pool.proxy_urls == []

    @pytest.mark.asyncio
    async def test_reads_environment_per_call(self, clean_env, pool):
        first = resolve_dispatcher("https://api.other.com/x", pool)
        with mock.patch.dict(os.environ, {"HTTP_PROXY": "http://proxy.local:8080"}):
            second = resolve_dispatcher("https://api.other.com/x", pool)
        assert first.is_direct
        assert not second.is_direct

    @pytest.mark.asyncio
    async def test_explicit_decision_skips_environment(self, clean_env, pool):
        decision = DispatchDecision.via_proxy("http://explicit:3128")
        with mock.patch("fetch_proxy_dispatcher.dispatcher.decide_dispatch") as decide:
            result = resolve_dispatcher("https://x.io", pool, decision=decision)
        decide.assert_not_called()
        assert result.proxy_dict["proxy"] == "http://explicit:3128"


class TestDispatcherPool:

    @pytest.mark.asyncio
    async def test_clients_are_reused(self, pool):
        decision = DispatchDecision.via_proxy("http://proxy.local:8080")
        assert pool.client_for(decision).client is pool.client_for(decision).client
        direct = DispatchDecision.direct()
        assert pool.client_for(direct).client is pool.client_for(direct).client

    @pytest.mark.asyncio
    async def test_one_client_per_proxy_url(self, pool):
        a = pool.client_for(DispatchDecision.via_proxy("http://a:1")).client
        b = pool.client_for(DispatchDecision.via_proxy("http://b:1")).client
        assert a is not b
        assert sorted(pool.proxy_urls) == ["http://a:1", "http://b:1"]

    @pytest.mark.asyncio
    async def test_closed_pool_rejects_requests(self):
        pool = create_dispatcher_pool()
        await pool.aclose()
        assert pool.closed
        with pytest.raises(RuntimeError, match="closed"):
            pool.client_for(DispatchDecision.direct())

    @pytest.mark.asyncio
    async def test_aclose_is_idempotent(self):
        pool = DispatcherPool()
        direct = pool.client_for(DispatchDecision.direct()).client
        await pool.aclose()
        await pool.aclose()
        assert direct.is_closed

    @pytest.mark.asyncio
    async def test_async_context_manager_closes_clients(self):
        async with DispatcherPool() as pool:
            proxied = pool.client_for(DispatchDecision.via_proxy("http://p:1")).client
        assert proxied.is_closed

    def test_unknown_adapter(self):
        with pytest.raises(KeyError):
            DispatcherPool(adapter="requests")


class TestHttpxAdapter:

    def test_build_kwargs_defaults(self, clean_env):
        kwargs = HttpxAdapter().get_proxy_dict(ProxyConfig(timeout=12.0))
        assert kwargs["trust_env"] is False
        assert kwargs["follow_redirects"] is True
        assert kwargs["verify"] is True
        assert kwargs["timeout"] == httpx.Timeout(12.0)
        assert "proxy" not in kwargs

    def test_env_disables_verification(self, clean_env):
        with mock.patch.dict(os.environ, {"NODE_TLS_REJECT_UNAUTHORIZED": "0"}):
            kwargs = HttpxAdapter().get_proxy_dict(ProxyConfig(ca_bundle="/etc/ca.pem"))
        assert kwargs["verify"] is False

    def test_ca_bundle(self, clean_env):
        kwargs = HttpxAdapter().get_proxy_dict(ProxyConfig(ca_bundle="/etc/ca.pem"))
        assert kwargs["verify"] == "/etc/ca.pem"

    def test_proxy_and_cert(self, clean_env):
        kwargs = HttpxAdapter().get_proxy_dict(
            ProxyConfig(proxy_url="http://p:1", cert=("c.pem", "k.pem"))
        )
        assert kwargs["proxy"] == "http://p:1"
        assert kwargs["cert"] == ("c.pem", "k.pem")
