"""
Tests for FigmaService against a mocked Figma API.
"""
import json

import pytest
from httpx import Response

from fetch_fallback import HttpStatusError, ProcessResult
from figma_client import (
    FigmaApiError,
    FigmaAuthOptions,
    FigmaService,
    ImageDownloadItem,
    SvgOptions,
)

AUTH = FigmaAuthOptions(figma_api_key="figd_test")


def make_service(pool, **kwargs):
    return FigmaService(AUTH, pool=pool, **kwargs)


class TestRawEndpoints:

    @pytest.mark.asyncio
    async def test_get_raw_file(self, pool, router, no_fallback):
        route = router.get(host="api.figma.com", path="/v1/files/abc").mock(
            return_value=Response(200, json={"name": "Design"})
        )
        service = make_service(pool, fallback_config=no_fallback)

        assert await service.get_raw_file("abc", depth=2) == {"name": "Design"}
        request = route.calls.last.request
        assert request.url.params["depth"] == "2"
        assert request.headers["X-Figma-Token"] == "figd_test"

    @pytest.mark.asyncio
    async def test_get_raw_file_without_depth_has_no_query(self, pool, router, no_fallback):
        route = router.get(host="api.figma.com", path="/v1/files/abc").mock(
            return_value=Response(200, json={})
        )
        await make_service(pool, fallback_config=no_fallback).get_raw_file("abc")
        assert route.calls.last.request.url.query == b""

    @pytest.mark.asyncio
    async def test_get_raw_node_encodes_ids(self, pool, router, no_fallback):
        route = router.get(host="api.figma.com", path="/v1/files/abc/nodes").mock(
            return_value=Response(200, json={"nodes": {}})
        )
        await make_service(pool, fallback_config=no_fallback).get_raw_node("abc", "1:2", depth=1)

        url = route.calls.last.request.url
        assert url.params["ids"] == "1:2"
        assert url.params["depth"] == "1"
        assert b"ids=1%3A2" in url.query

    @pytest.mark.asyncio
    async def test_raw_response_written_to_log_dir(self, pool, router, no_fallback, tmp_path):
        router.get(host="api.figma.com", path="/v1/files/abc").mock(
            return_value=Response(200, json={"document": {"id": "0:0"}})
        )
        service = make_service(pool, fallback_config=no_fallback, log_dir=tmp_path)
        await service.get_raw_file("abc")

        written = json.loads((tmp_path / "figma-raw.json").read_text())
        assert written == {"document": {"id": "0:0"}}


class TestImageUrls:

    @pytest.mark.asyncio
    async def test_image_fill_urls_from_meta(self, pool, router, no_fallback):
        router.get(host="api.figma.com", path="/v1/files/abc/images").mock(
            return_value=Response(200, json={"meta": {"images": {"ref1": "https://cdn/1", "ref2": None}}})
        )
        urls = await make_service(pool, fallback_config=no_fallback).get_image_fill_urls("abc")
        assert urls == {"ref1": "https://cdn/1"}

    @pytest.mark.asyncio
    async def test_png_render_urls(self, pool, router, no_fallback):
        route = router.get(host="api.figma.com", path="/v1/images/abc").mock(
            return_value=Response(200, json={"images": {"1:2": "https://cdn/a.png", "3:4": None}})
        )
        urls = await make_service(pool, fallback_config=no_fallback).get_node_render_urls(
            "abc", ["1:2", "3:4"], "png"
        )

        assert urls == {"1:2": "https://cdn/a.png"}
        params = route.calls.last.request.url.params
        assert params["ids"] == "1:2,3:4"
        assert params["format"] == "png"
        assert params["scale"] == "2"

    @pytest.mark.asyncio
    async def test_svg_render_urls_default_options(self, pool, router, no_fallback):
        route = router.get(host="api.figma.com", path="/v1/images/abc").mock(
            return_value=Response(200, json={"images": {}})
        )
        await make_service(pool, fallback_config=no_fallback).get_node_render_urls("abc", ["1:2"], "svg")

        params = route.calls.last.request.url.params
        assert params["format"] == "svg"
        assert params["svg_outline_text"] == "true"
        assert params["svg_include_id"] == "false"
        assert params["svg_simplify_stroke"] == "true"

    @pytest.mark.asyncio
    async def test_svg_custom_options(self, pool, router, no_fallback):
        route = router.get(host="api.figma.com", path="/v1/images/abc").mock(
            return_value=Response(200, json={"images": {}})
        )
        await make_service(pool, fallback_config=no_fallback).get_node_render_urls(
            "abc", ["1:2"], "svg", svg_options=SvgOptions(outline_text=False, include_id=True)
        )
        params = route.calls.last.request.url.params
        assert params["svg_outline_text"] == "false"
        assert params["svg_include_id"] == "true"

    @pytest.mark.asyncio
    async def test_empty_node_list_makes_no_request(self, pool, router, no_fallback):
        route = router.get(host="api.figma.com")
        assert await make_service(pool, fallback_config=no_fallback).get_node_render_urls("abc", []) == {}
        assert route.call_count == 0

    @pytest.mark.asyncio
    async def test_unknown_format_rejected(self, pool, no_fallback):
        with pytest.raises(ValueError):
            await make_service(pool, fallback_config=no_fallback).get_node_render_urls("abc", ["1"], "gif")


class TestErrors:

    @pytest.mark.asyncio
    async def test_failure_wrapped_with_endpoint(self, pool, router, make_runner):
        router.get(host="api.figma.com", path="/v1/files/abc").mock(return_value=Response(404))
        runner = make_runner(ProcessResult(stdout="", stderr=""))
        service = make_service(pool, runner=runner)

        with pytest.raises(FigmaApiError) as exc_info:
            await service.get_raw_file("abc")

        assert str(exc_info.value) == (
            "Failed to make request to Figma API endpoint '/files/abc': "
            "Fetch failed with status 404: Not Found"
        )
        assert exc_info.value.endpoint == "/files/abc"
        assert isinstance(exc_info.value.__cause__, HttpStatusError)
        assert len(runner.calls) == 1

    @pytest.mark.asyncio
    async def test_curl_fallback_recovers(self, pool, router, make_runner):
        router.get(host="api.figma.com", path="/v1/files/abc").mock(return_value=Response(503))
        runner = make_runner(ProcessResult(stdout='{"name": "via curl"}', stderr=""))
        service = make_service(pool, runner=runner)

        assert await service.get_raw_file("abc") == {"name": "via curl"}
        url, headers = runner.calls[0]
        assert url == "https://api.figma.com/v1/files/abc"
        assert headers == {"X-Figma-Token": "figd_test"}


class TestDownloadImages:

    @pytest.mark.asyncio
    async def test_downloads_fills_png_and_svg(self, pool, router, no_fallback, tmp_path):
        router.get(host="api.figma.com", path="/v1/files/abc/images").mock(
            return_value=Response(200, json={"meta": {"images": {"ref1": "https://cdn.figma.test/fill"}}})
        )

        def render(request):
            if request.url.params["format"] == "svg":
                return Response(200, json={"images": {"2:2": "https://cdn.figma.test/vector"}})
            return Response(200, json={"images": {"1:1": "https://cdn.figma.test/frame", "9:9": None}})

        router.get(host="api.figma.com", path="/v1/images/abc").mock(side_effect=render)
        router.get(host="cdn.figma.test", path="/fill").mock(return_value=Response(200, content=b"FILL"))
        router.get(host="cdn.figma.test", path="/frame").mock(return_value=Response(200, content=b"PNGDATA"))
        router.get(host="cdn.figma.test", path="/vector").mock(return_value=Response(200, content=b"<svg/>"))

        service = make_service(pool, fallback_config=no_fallback)
        results = await service.download_images("abc", tmp_path, [
            ImageDownloadItem(file_name="fill.png", image_ref="ref1"),
            ImageDownloadItem(file_name="frame.png", node_id="1:1"),
            ImageDownloadItem(file_name="icon.SVG", node_id="2:2"),
            ImageDownloadItem(file_name="missing.png", node_id="9:9"),
        ])

        by_name = {result.file_name: result for result in results}
        assert set(by_name) == {"fill.png", "frame.png", "icon.SVG"}
        assert (tmp_path / "frame.png").read_bytes() == b"PNGDATA"
        assert by_name["icon.SVG"].size_bytes == len(b"<svg/>")
        assert by_name["fill.png"].url == "https://cdn.figma.test/fill"

    @pytest.mark.asyncio
    async def test_empty_items(self, pool, no_fallback, tmp_path):
        assert await make_service(pool, fallback_config=no_fallback).download_images("abc", tmp_path, []) == []

    @pytest.mark.asyncio
    async def test_path_escape_rejected(self, pool, router, no_fallback, tmp_path):
        router.get(host="api.figma.com", path="/v1/images/abc").mock(
            return_value=Response(200, json={"images": {"1:1": "https://cdn.figma.test/frame"}})
        )
        service = make_service(pool, fallback_config=no_fallback)

        with pytest.raises(ValueError):
            await service.download_images("abc", tmp_path / "out", [
                ImageDownloadItem(file_name="../escape.png", node_id="1:1"),
            ])


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_shared_pool_is_not_closed(self, pool):
        async with make_service(pool):
            pass
        assert pool.closed is False

    @pytest.mark.asyncio
    async def test_private_pool_is_closed(self, clean_env):
        service = FigmaService(AUTH)
        await service.aclose()
        assert service.pool.closed is True
