"""
figma_client - Figma REST API client on top of fetch_fallback.

Example:
    >>> from figma_client import FigmaService, FigmaAuthOptions, ImageDownloadItem
    >>>
    >>> async with FigmaService(FigmaAuthOptions(figma_api_key=key)) as figma:
    ...     nodes = await figma.get_raw_node("abc123", "1:2")
    ...     await figma.download_images("abc123", "./assets", [
    ...         ImageDownloadItem(file_name="logo.svg", node_id="1:2"),
    ...     ])
"""
from .types import FigmaAuthOptions, ImageDownloadItem, ImageDownloadResult, SvgOptions
from .errors import FigmaApiError, FigmaAuthError, FigmaError, ImageDownloadError
from .auth import FigmaAuthResolver
from .raw_logs import write_raw_response
from .images import download_image, resolve_target_path
from .service import FIGMA_API_BASE_URL, FigmaService, filter_valid_images

__all__ = [
    "FigmaAuthOptions",
    "ImageDownloadItem",
    "ImageDownloadResult",
    "SvgOptions",
    "FigmaApiError",
    "FigmaAuthError",
    "FigmaError",
    "ImageDownloadError",
    "FigmaAuthResolver",
    "write_raw_response",
    "download_image",
    "resolve_target_path",
    "FIGMA_API_BASE_URL",
    "FigmaService",
    "filter_valid_images",
]

__version__ = "1.0.0"
