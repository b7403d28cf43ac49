"""
In-memory credential store
Suitable for tests and single-process use without Redis
"""
from typing import Dict, Mapping, Optional

from ..types import CredentialStore


class MemoryCredentialStore(CredentialStore):
    """Dict-backed implementation of CredentialStore."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        self._connected = True

    async def disconnect(self) -> None:
        self._connected = False

    async def get(self, key: str) -> Optional[str]:
        if not self._connected:
            await self.connect()
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


def create_memory_store(initial: Optional[Mapping[str, str]] = None) -> MemoryCredentialStore:
    return MemoryCredentialStore(initial)
