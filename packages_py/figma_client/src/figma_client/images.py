"""
Image download helpers
"""
import logging
from pathlib import Path
from typing import Union

import httpx

from fetch_proxy_dispatcher import DispatcherPool, resolve_dispatcher

from .errors import ImageDownloadError
from .types import ImageDownloadResult

logger = logging.getLogger("figma_client.images")


def resolve_target_path(local_path: Union[str, Path], file_name: str) -> Path:
    """
    Join `file_name` onto `local_path`, refusing names that escape it.

    Raises:
        ValueError: If the resolved path is outside `local_path`.
    """
    base = Path(local_path).resolve()
    target = (base / file_name).resolve()
    if target == base or base not in target.parents:
        raise ValueError(f"Image file name {file_name!r} escapes the target directory {str(base)!r}")
    return target


async def download_image(
    pool: DispatcherPool,
    url: str,
    local_path: Union[str, Path],
    file_name: str,
) -> ImageDownloadResult:
    """
    Download one image through the dispatcher pool and write it to disk.

    Raises:
        ValueError: If `file_name` escapes `local_path`.
        ImageDownloadError: On transport, HTTP status or write failure.
    """
    target = resolve_target_path(local_path, file_name)
    client = resolve_dispatcher(url, pool).client

    logger.debug(f"download_image: {file_name} <- {url}")
    try:
        response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"download_image: Failed to download {file_name}: {type(e).__name__}: {e}")
        raise ImageDownloadError(file_name, url, str(e) or type(e).__name__) from e

    content = response.content
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
    except OSError as e:
        logger.error(f"download_image: Failed to write {target}: {e}")
        raise ImageDownloadError(file_name, url, str(e)) from e

    logger.info(f"download_image: Saved {target} ({len(content)} bytes)")
    return ImageDownloadResult(
        file_path=str(target),
        file_name=file_name,
        url=url,
        size_bytes=len(content),
    )
