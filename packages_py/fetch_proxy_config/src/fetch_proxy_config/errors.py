from typing import Optional


class ConfigurationError(Exception):
    """
    Malformed proxy or credential configuration.

    The resolver only logs this and falls back to a safe default;
    configuration loaders raise it.
    """

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.url = url

    def __str__(self) -> str:
        if self.url is not None:
            return f"{self.message} (url={self.url!r})"
        return self.message
