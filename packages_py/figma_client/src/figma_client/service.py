"""
Figma REST API client
"""
import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
from urllib.parse import quote, urlencode

from credential_store import CredentialStore
from fetch_fallback import (
    ExternalHttpRunner,
    FallbackConfig,
    FallbackExecutor,
    FetchError,
    RequestOptions,
)
from fetch_proxy_dispatcher import DispatcherPool

from .auth import FigmaAuthResolver
from .errors import FigmaApiError
from .images import download_image
from .raw_logs import write_raw_response
from .types import (
    FigmaAuthOptions,
    ImageDownloadItem,
    ImageDownloadResult,
    SvgOptions,
)

logger = logging.getLogger("figma_client.service")

FIGMA_API_BASE_URL = "https://api.figma.com/v1"
RAW_LOG_FILE_NAME = "figma-raw.json"


def filter_valid_images(images: Optional[Mapping[str, Optional[str]]]) -> Dict[str, str]:
    """Drop entries whose URL is null or empty."""
    if not images:
        return {}
    return {key: value for key, value in images.items() if value}


class FigmaService:
    """
    Figma API client.

    Every request is a JSON GET through fetch_fallback, so it is routed by
    the proxy rules and retried once through curl when httpx fails.

    Example:
        async with FigmaService(FigmaAuthOptions(figma_api_key=key)) as figma:
            file = await figma.get_raw_file("abc123", depth=2)
    """

    def __init__(
        self,
        auth: FigmaAuthOptions,
        *,
        pool: Optional[DispatcherPool] = None,
        store: Optional[CredentialStore] = None,
        runner: Optional[ExternalHttpRunner] = None,
        fallback_config: Optional[FallbackConfig] = None,
        log_dir: Optional[Union[str, Path]] = None,
        base_url: str = FIGMA_API_BASE_URL,
    ) -> None:
        """
        Args:
            auth: Static credentials
            pool: Shared dispatcher pool. A private pool is created (and
                closed by aclose()) when omitted.
            store: Credential store for session_hash lookups
            runner: External HTTP client for the fallback
            fallback_config: Fallback configuration
            log_dir: Directory for raw response dumps (disabled when None)
            base_url: API base URL
        """
        self._auth = FigmaAuthResolver(auth, store)
        self._owns_pool = pool is None
        self._pool = pool if pool is not None else DispatcherPool()
        self._executor = FallbackExecutor(self._pool, runner, fallback_config)
        self._log_dir = log_dir
        self._base_url = base_url.rstrip("/")

    @property
    def pool(self) -> DispatcherPool:
        return self._pool

    @property
    def store(self) -> Optional[CredentialStore]:
        return self._auth.store

    async def _request(self, endpoint: str, session_hash: Optional[str] = None) -> Any:
        url = f"{self._base_url}{endpoint}"
        logger.info(f"FigmaService: Calling {url}")
        headers = await self._auth.headers(session_hash)

        try:
            return await self._executor.fetch_json(url, RequestOptions(headers=headers))
        except FetchError as e:
            raise FigmaApiError(endpoint, e.message) from e

    async def get_raw_file(
        self,
        file_key: str,
        depth: Optional[int] = None,
        session_hash: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Fetch a whole file document (GET /files/{key})."""
        endpoint = f"/files/{quote(file_key, safe='')}"
        if depth:
            endpoint += f"?{urlencode({'depth': depth})}"
        logger.info(f"FigmaService: Retrieving raw file {file_key} (depth: {depth or 'default'})")

        response = await self._request(endpoint, session_hash)
        write_raw_response(self._log_dir, RAW_LOG_FILE_NAME, response)
        return response

    async def get_raw_node(
        self,
        file_key: str,
        node_id: str,
        depth: Optional[int] = None,
        session_hash: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Fetch specific nodes of a file (GET /files/{key}/nodes)."""
        params: Dict[str, Any] = {"ids": node_id}
        if depth:
            params["depth"] = depth
        endpoint = f"/files/{quote(file_key, safe='')}/nodes?{urlencode(params)}"
        logger.info(
            f"FigmaService: Retrieving raw node {node_id} from {file_key} (depth: {depth or 'default'})"
        )

        response = await self._request(endpoint, session_hash)
        write_raw_response(self._log_dir, RAW_LOG_FILE_NAME, response)
        return response

    async def get_image_fill_urls(
        self,
        file_key: str,
        session_hash: Optional[str] = None,
    ) -> Dict[str, str]:
        """Map of imageRef to download URL for all image fills in a file."""
        endpoint = f"/files/{quote(file_key, safe='')}/images"
        response = await self._request(endpoint, session_hash)
        meta = response.get("meta") or {}
        return filter_valid_images(meta.get("images"))

    async def get_node_render_urls(
        self,
        file_key: str,
        node_ids: Sequence[str],
        format: str = "png",
        png_scale: float = 2,
        svg_options: Optional[SvgOptions] = None,
        session_hash: Optional[str] = None,
    ) -> Dict[str, str]:
        """
        Map of node id to rendered image URL.

        Raises:
            ValueError: If `format` is not "png" or "svg".
        """
        if not node_ids:
            return {}

        params: Dict[str, Any] = {"ids": ",".join(node_ids)}
        if format == "png":
            params.update(format="png", scale=png_scale or 2)
        elif format == "svg":
            params["format"] = "svg"
            params.update((svg_options or SvgOptions()).to_query_params())
        else:
            raise ValueError(f"Unsupported render format: {format!r}")

        endpoint = f"/images/{quote(file_key, safe='')}?{urlencode(params)}"
        response = await self._request(endpoint, session_hash)
        return filter_valid_images(response.get("images"))

    async def download_images(
        self,
        file_key: str,
        local_path: Union[str, Path],
        items: Sequence[ImageDownloadItem],
        png_scale: float = 2,
        svg_options: Optional[SvgOptions] = None,
        session_hash: Optional[str] = None,
    ) -> List[ImageDownloadResult]:
        """
        Resolve download URLs for `items` and save the images under `local_path`.

        Items whose URL cannot be resolved are skipped with a warning.

        Raises:
            ValueError: If a file name escapes `local_path`.
            FigmaApiError: If a URL lookup fails.
            ImageDownloadError: If a download fails.
        """
        if not items:
            return []

        image_fills = [item for item in items if item.image_ref]
        render_nodes = [item for item in items if not item.image_ref and item.node_id]
        png_nodes = [item for item in render_nodes if not item.file_name.lower().endswith(".svg")]
        svg_nodes = [item for item in render_nodes if item.file_name.lower().endswith(".svg")]

        planned: List[tuple] = []
        if image_fills:
            fill_urls = await self.get_image_fill_urls(file_key, session_hash)
            planned.extend((item, fill_urls.get(item.image_ref)) for item in image_fills)
        if png_nodes:
            png_urls = await self.get_node_render_urls(
                file_key, [item.node_id for item in png_nodes], "png",
                png_scale=png_scale, session_hash=session_hash,
            )
            planned.extend((item, png_urls.get(item.node_id)) for item in png_nodes)
        if svg_nodes:
            svg_urls = await self.get_node_render_urls(
                file_key, [item.node_id for item in svg_nodes], "svg",
                svg_options=svg_options, session_hash=session_hash,
            )
            planned.extend((item, svg_urls.get(item.node_id)) for item in svg_nodes)

        downloads = []
        for item, url in planned:
            if not url:
                logger.warning(f"FigmaService: No download URL for {item.file_name}, skipping")
                continue
            downloads.append(download_image(self._pool, url, local_path, item.file_name))

        results = await asyncio.gather(*downloads)
        logger.info(f"FigmaService: Downloaded {len(results)} of {len(items)} images to {local_path}")
        return list(results)

    async def aclose(self) -> None:
        """Close the private dispatcher pool, if this service created one."""
        if self._owns_pool:
            await self._pool.aclose()

    async def __aenter__(self) -> "FigmaService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
