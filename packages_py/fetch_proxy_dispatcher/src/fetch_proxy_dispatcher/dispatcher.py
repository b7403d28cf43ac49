"""
Per-request dispatcher selection.
"""
import logging
from typing import Optional

from fetch_proxy_config import DispatchDecision, decide_dispatch, mask_proxy_url

from .factory import DispatcherPool
from .models import DispatcherResult

logger = logging.getLogger("fetch_proxy_dispatcher.dispatcher")


def resolve_dispatcher(
    url: str,
    pool: DispatcherPool,
    decision: Optional[DispatchDecision] = None,
) -> DispatcherResult:
    """
    Select the client a request to `url` should use.

    The proxy environment and NO_PROXY rules are evaluated on every call,
    since the outcome depends on the destination host.

    Args:
        url: Absolute destination URL.
        pool: Pool owning the shared clients.
        decision: Precomputed decision (skips environment evaluation).

    Returns:
        DispatcherResult with the selected client.
    """
    decision = decision if decision is not None else decide_dispatch(url)
    result = pool.client_for(decision)
    logger.debug(
        f"resolve_dispatcher: url={url!r}, use_proxy={decision.use_proxy}, "
        f"proxy={mask_proxy_url(decision.proxy_url)}"
    )
    return result
