"""
Shared fixtures: a DispatcherPool whose clients are served by a respx router.
"""
import os
from unittest import mock

import httpx
import pytest
import pytest_asyncio
import respx

from fetch_fallback import FallbackConfig, ProcessResult
from fetch_proxy_dispatcher import BaseAdapter, DispatcherPool


class FakeRunner:
    """Stands in for curl."""

    def __init__(self, result=None):
        self.result = result or ProcessResult(stdout="", stderr="")
        self.calls = []

    async def run_external_http_get(self, url, headers, timeout=None):
        self.calls.append((url, dict(headers)))
        return self.result


@pytest.fixture
def clean_env():
    with mock.patch.dict(os.environ, {}, clear=True):
        yield


@pytest.fixture
def router():
    return respx.MockRouter(assert_all_called=False)


@pytest_asyncio.fixture
async def pool(clean_env, router):
    class RouterAdapter(BaseAdapter):
        name = "respx"

        def create_async_client(self, config):
            return httpx.AsyncClient(transport=httpx.MockTransport(router.async_handler))

        def get_proxy_dict(self, config):
            return {}

    DispatcherPool.register_adapter("respx", RouterAdapter)
    pool = DispatcherPool(adapter="respx")
    yield pool
    await pool.aclose()


@pytest.fixture
def make_runner():
    return FakeRunner


@pytest.fixture
def no_fallback():
    return FallbackConfig(enabled=False)
