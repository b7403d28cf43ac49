"""
External HTTP client used by the fallback path.
"""
import asyncio
import logging
from typing import Mapping, Optional, Protocol

from .config import build_curl_args, mask_headers
from .errors import FallbackProcessError
from .types import ProcessResult

logger = logging.getLogger("fetch_fallback.runner")


class ExternalHttpRunner(Protocol):
    """
    Issues a GET through an HTTP implementation independent of httpx.

    Implementations may shell out (CurlRunner) or use a pure library
    client where spawning processes is not possible.
    """

    async def run_external_http_get(
        self,
        url: str,
        headers: Mapping[str, str],
        timeout: Optional[float] = None,
    ) -> ProcessResult:
        ...


class CurlRunner:
    """Runs curl as a subprocess with an argument vector (no shell)."""

    def __init__(self, curl_binary: str = "curl") -> None:
        self._curl_binary = curl_binary

    @property
    def curl_binary(self) -> str:
        return self._curl_binary

    async def run_external_http_get(
        self,
        url: str,
        headers: Mapping[str, str],
        timeout: Optional[float] = None,
    ) -> ProcessResult:
        """
        Execute curl and capture its output.

        Raises:
            FallbackProcessError: If curl cannot be started or exceeds `timeout`.
        """
        args = build_curl_args(url, headers, self._curl_binary)
        logger.debug(
            f"CurlRunner: executing {self._curl_binary} for {url} "
            f"with headers={mask_headers(headers)}"
        )

        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise FallbackProcessError(
                f"Could not start {self._curl_binary!r}: {e}",
                url=url,
            ) from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise FallbackProcessError(
                f"Curl command timed out after {timeout:.1f}s",
                url=url,
            ) from e

        return ProcessResult(
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
            returncode=process.returncode if process.returncode is not None else -1,
        )
