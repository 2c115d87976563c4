"""In-memory OAuth token store, one record per connector key."""

from abc import ABC, abstractmethod
from threading import Lock

from shortsbot.schemas.account import OAuthTokenRecord


class TokenStore(ABC):
    """Storage for OAuth token records keyed by connector key."""

    @abstractmethod
    async def get(self, key: str) -> OAuthTokenRecord | None:
        """Return the record for ``key`` or None."""

    @abstractmethod
    async def set(self, record: OAuthTokenRecord) -> None:
        """Insert or replace the record stored under ``record.key``."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the record for ``key``; a missing record is not an error."""

    @abstractmethod
    async def keys(self) -> list[str]:
        """Return every connected key."""


class InMemoryTokenStore(TokenStore):
    """Process-local token store."""

    def __init__(self) -> None:
        self._records: dict[str, OAuthTokenRecord] = {}
        self._lock = Lock()

    async def get(self, key: str) -> OAuthTokenRecord | None:
        with self._lock:
            record = self._records.get(key)
            return record.model_copy() if record else None

    async def set(self, record: OAuthTokenRecord) -> None:
        with self._lock:
            self._records[record.key] = record.model_copy()

    async def delete(self, key: str) -> None:
        with self._lock:
            self._records.pop(key, None)

    async def keys(self) -> list[str]:
        with self._lock:
            return list(self._records)
