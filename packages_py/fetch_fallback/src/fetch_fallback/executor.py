"""
Main fallback executor implementation
"""
import logging
import time
from typing import Any, Callable, Mapping, Optional

import httpx

from fetch_proxy_dispatcher import DispatcherPool, resolve_dispatcher

from .config import interpret_fallback_output, merge_config
from .errors import FetchError, HttpStatusError, JsonParseError, NetworkError
from .runner import CurlRunner, ExternalHttpRunner
from .types import (
    Attempt,
    FallbackConfig,
    FetchEvent,
    FetchEventListener,
    FetchFailure,
    FetchOutcome,
    FetchSuccess,
    RequestOptions,
)

logger = logging.getLogger("fetch_fallback.executor")


class FallbackExecutor:
    """
    Fallback Executor

    Runs one logical JSON request as at most two attempts:
    - PRIMARY: httpx through the client selected by the dispatcher pool
    - FALLBACK: the same GET through an external HTTP client (curl)

    There is no retry loop and no backoff. If both attempts fail, the
    primary error is what the caller sees; the fallback error is only
    logged and attached as `fallback_error`.
    """

    def __init__(
        self,
        pool: Optional[DispatcherPool] = None,
        runner: Optional[ExternalHttpRunner] = None,
        config: Optional[FallbackConfig] = None,
        executor_id: Optional[str] = None,
    ):
        """
        Create a new FallbackExecutor.

        Args:
            pool: Pool providing direct/proxied clients. Not owned; the caller closes it.
            runner: External HTTP client for the fallback (default: CurlRunner)
            config: Fallback configuration
            executor_id: Optional unique identifier
        """
        self._config = merge_config(config)
        self._pool = pool
        self._runner = runner if runner is not None else CurlRunner(self._config.curl_binary)
        self._id = executor_id or f"fallback-{int(time.time() * 1000)}"
        self._listeners: list[FetchEventListener] = []

    def _emit(self, event: FetchEvent) -> None:
        """Emit an event to all listeners."""
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.warning(
                    f"FallbackExecutor: listener failed on '{event.type}': {type(e).__name__}: {e}"
                )

    def _select_client(self, url: str, options: RequestOptions) -> httpx.AsyncClient:
        if options.client is not None:
            return options.client
        if self._pool is None:
            raise RuntimeError("FallbackExecutor needs a DispatcherPool or an explicit client")
        return resolve_dispatcher(url, self._pool).client

    async def _primary(
        self,
        client: httpx.AsyncClient,
        url: str,
        options: RequestOptions,
        timeout: Optional[float],
    ) -> Any:
        kwargs: dict = {"headers": options.headers}
        if options.body is not None:
            kwargs["content"] = options.body
        if timeout is not None:
            kwargs["timeout"] = timeout

        try:
            response = await client.request(options.method, url, **kwargs)
        except Exception as e:
            # request building errors (bad header encoding, bad URL) count as transport failures
            raise NetworkError(str(e) or type(e).__name__, url=url) from e

        if not response.is_success:
            raise HttpStatusError(response.status_code, response.reason_phrase or "", url=url)

        try:
            return response.json()
        except ValueError as e:
            raise JsonParseError(f"Response is not valid JSON: {e}", url=url) from e

    async def _fallback(
        self,
        url: str,
        headers: Mapping[str, str],
        timeout: Optional[float],
    ) -> Any:
        result = await self._runner.run_external_http_get(url, headers, timeout=timeout)
        return interpret_fallback_output(result, url, self._config.error_keywords)

    def _skip_fallback(self, url: str, error: FetchError, reason: str) -> FetchFailure:
        logger.error(f"[fetch_json] Skipping curl fallback for {url}: {reason}")
        self._emit(FetchEvent(
            type="fallback:skip",
            attempt=Attempt.FALLBACK,
            data={"url": url, "reason": reason},
        ))
        return FetchFailure(error=error, attempt=Attempt.PRIMARY)

    async def execute(
        self,
        url: str,
        options: Optional[RequestOptions] = None,
    ) -> FetchOutcome:
        """
        Fetch JSON from `url`, falling back to the external client on failure.

        Args:
            url: Absolute URL
            options: Request options

        Returns:
            FetchSuccess or FetchFailure. FetchError is never raised here.

        Example:
            async with DispatcherPool() as pool:
                outcome = await FallbackExecutor(pool).execute("https://api.example.com/x")
        """
        opts = options or RequestOptions()
        client = self._select_client(url, opts)

        started = time.monotonic()
        deadline = self._config.deadline_seconds
        primary_timeout = opts.timeout
        if deadline is not None:
            primary_timeout = deadline if primary_timeout is None else min(primary_timeout, deadline)

        self._emit(FetchEvent(type="attempt:start", attempt=Attempt.PRIMARY, data={"url": url}))
        try:
            value = await self._primary(client, url, opts, primary_timeout)
        except FetchError as error:
            primary_error = error
        else:
            self._emit(FetchEvent(
                type="attempt:success",
                attempt=Attempt.PRIMARY,
                data={"url": url, "duration_seconds": time.monotonic() - started},
            ))
            return FetchSuccess(value=value, attempt=Attempt.PRIMARY)

        self._emit(FetchEvent(
            type="attempt:fail",
            attempt=Attempt.PRIMARY,
            data={"url": url, "error": primary_error.message, "kind": type(primary_error).__name__},
        ))

        if not self._config.enabled:
            logger.warning(f"[fetch_json] Initial fetch failed for {url}: {primary_error.message}")
            return self._skip_fallback(url, primary_error, "fallback disabled")

        if opts.method != "GET":
            logger.warning(f"[fetch_json] Initial fetch failed for {url}: {primary_error.message}")
            return self._skip_fallback(url, primary_error, f"method {opts.method} is not replayed through curl")

        logger.warning(
            f"[fetch_json] Initial fetch failed for {url}: {primary_error.message}. "
            "Likely a corporate proxy or SSL issue. Attempting curl fallback."
        )

        remaining: Optional[float] = None
        if deadline is not None:
            remaining = deadline - (time.monotonic() - started)
            if remaining <= 0:
                return self._skip_fallback(url, primary_error, f"deadline of {deadline}s exhausted")

        self._emit(FetchEvent(type="attempt:start", attempt=Attempt.FALLBACK, data={"url": url}))
        try:
            value = await self._fallback(url, opts.headers, remaining)
        except Exception as fallback_error:
            logger.error(
                f"[fetch_json] Curl fallback also failed for {url}: "
                f"{type(fallback_error).__name__}: {fallback_error}"
            )
            self._emit(FetchEvent(
                type="attempt:fail",
                attempt=Attempt.FALLBACK,
                data={"url": url, "error": str(fallback_error), "kind": type(fallback_error).__name__},
            ))
            primary_error.fallback_error = fallback_error
            return FetchFailure(
                error=primary_error,
                attempt=Attempt.PRIMARY,
                fallback_error=fallback_error,
            )

        self._emit(FetchEvent(
            type="attempt:success",
            attempt=Attempt.FALLBACK,
            data={"url": url, "duration_seconds": time.monotonic() - started},
        ))
        return FetchSuccess(value=value, attempt=Attempt.FALLBACK)

    async def fetch_json(self, url: str, options: Optional[RequestOptions] = None) -> Any:
        """
        Like execute(), but returns the parsed JSON or raises the surfaced error.

        Raises:
            FetchError: The primary error when both attempts failed.
        """
        outcome = await self.execute(url, options)
        if isinstance(outcome, FetchFailure):
            raise outcome.error
        return outcome.value

    def on(self, listener: FetchEventListener) -> Callable[[], None]:
        """
        Add an event listener.

        Returns:
            Function to remove the listener
        """
        self._listeners.append(listener)
        return lambda: self.off(listener)

    def off(self, listener: FetchEventListener) -> None:
        """Remove an event listener."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def id(self) -> str:
        return self._id

    @property
    def config(self) -> FallbackConfig:
        return self._config


def create_fallback_executor(
    pool: Optional[DispatcherPool] = None,
    runner: Optional[ExternalHttpRunner] = None,
    config: Optional[FallbackConfig] = None,
) -> FallbackExecutor:
    """Create a new fallback executor."""
    return FallbackExecutor(pool=pool, runner=runner, config=config)


async def fetch_json(
    url: str,
    options: Optional[RequestOptions] = None,
    *,
    pool: Optional[DispatcherPool] = None,
    runner: Optional[ExternalHttpRunner] = None,
    config: Optional[FallbackConfig] = None,
) -> Any:
    """
    Fetch and parse JSON with a single curl fallback (convenience function).

    Without a pool (and without options.client) a short-lived pool is
    created for this call and closed afterwards.

    Args:
        url: Absolute URL
        options: Request options (headers must be a plain dict)
        pool: Shared DispatcherPool
        runner: External HTTP client for the fallback
        config: Fallback configuration

    Returns:
        Parsed JSON value

    Raises:
        FetchError: The primary error if both attempts failed

    Example:
        data = await fetch_json(
            "https://api.figma.com/v1/me",
            RequestOptions(headers={"X-Figma-Token": token}),
            pool=pool,
        )
    """
    opts = options or RequestOptions()
    if pool is None and opts.client is None:
        async with DispatcherPool() as owned_pool:
            return await FallbackExecutor(owned_pool, runner, config).fetch_json(url, opts)
    return await FallbackExecutor(pool, runner, config).fetch_json(url, opts)
