"""
Type definitions for credential_store
"""
from abc import ABC, abstractmethod
from typing import Optional


class CredentialStore(ABC):
    """Key-value lookup of per-session credentials"""

    @property
    @abstractmethod
    def connected(self) -> bool:
        """Whether the backing connection is currently open"""
        pass

    @abstractmethod
    async def connect(self) -> None:
        """Open the connection. No-op when already connected."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the connection. No-op when not connected."""
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the credential stored under `key`, or None when absent"""
        pass
