"""
Errors raised by figma_client
"""


class FigmaError(Exception):
    """Base class for figma_client errors."""


class FigmaAuthError(FigmaError):
    """No usable Figma credential is available."""


class FigmaApiError(FigmaError):
    """A Figma API request failed after the fallback was exhausted."""

    def __init__(self, endpoint: str, message: str) -> None:
        super().__init__(f"Failed to make request to Figma API endpoint '{endpoint}': {message}")
        self.endpoint = endpoint


class ImageDownloadError(FigmaError):
    """An image could not be downloaded or written to disk."""

    def __init__(self, file_name: str, url: str, message: str) -> None:
        super().__init__(f"Failed to download image '{file_name}': {message}")
        self.file_name = file_name
        self.url = url
