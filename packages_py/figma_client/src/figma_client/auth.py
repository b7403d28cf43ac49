"""
Figma authentication header resolution
"""
import logging
from typing import Dict, Optional

from credential_store import CredentialStore, mask_secret

from .errors import FigmaAuthError
from .types import FigmaAuthOptions

logger = logging.getLogger("figma_client.auth")


class FigmaAuthResolver:
    """
    Builds Figma auth headers.

    OAuth (Authorization: Bearer) wins when enabled and a token is set.
    Otherwise a personal access token is sent as X-Figma-Token, looked up
    per session in the credential store when a session hash is given and
    falling back to the configured key.
    """

    def __init__(
        self,
        options: FigmaAuthOptions,
        store: Optional[CredentialStore] = None,
    ) -> None:
        self._api_key = options.figma_api_key or ""
        self._oauth_token = options.figma_oauth_token or ""
        self._use_oauth = bool(options.use_oauth and self._oauth_token)
        self._store = store

    @property
    def uses_oauth(self) -> bool:
        return self._use_oauth

    @property
    def store(self) -> Optional[CredentialStore]:
        return self._store

    async def _lookup_session_key(self, session_hash: str) -> Optional[str]:
        if self._store is None:
            logger.warning(
                "FigmaAuthResolver: session_hash given but no credential store is configured, "
                "falling back to configured API key"
            )
            return None

        try:
            api_key = await self._store.get(session_hash)
        except Exception as e:
            logger.error(
                f"FigmaAuthResolver: Error retrieving API key for session {mask_secret(session_hash)}, "
                f"falling back to configured API key: {type(e).__name__}: {e}"
            )
            return None

        if api_key:
            logger.info("FigmaAuthResolver: Using API key from credential store session")
            return api_key

        logger.info(
            "FigmaAuthResolver: No API key found for session, falling back to configured API key"
        )
        return None

    async def headers(self, session_hash: Optional[str] = None) -> Dict[str, str]:
        """
        Return the auth headers for one request.

        Raises:
            FigmaAuthError: If neither OAuth nor any API key is available.
        """
        if self._use_oauth:
            logger.debug("FigmaAuthResolver: Using OAuth Bearer token for authentication")
            return {"Authorization": f"Bearer {self._oauth_token}"}

        api_key = self._api_key
        if session_hash:
            api_key = await self._lookup_session_key(session_hash) or api_key

        if not api_key:
            raise FigmaAuthError(
                "No Figma API key available. Either provide session_hash with a valid "
                "stored key or configure FIGMA_API_KEY"
            )

        logger.debug("FigmaAuthResolver: Using Personal Access Token for authentication")
        return {"X-Figma-Token": api_key}
