"""Storage interface behind the transfer lookup cache."""

from abc import ABC, abstractmethod
from typing import Any

from walletlink.constants import CACHE_KEY_PREFIX


class CacheBackend(ABC):
    """
    Key-value store for counterparty maps.

    Entries are written once and kept for the lifetime of the backend. There
    is no expiry and no eviction.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """
        Retrieve a stored value.

        Returns:
            The stored value, or None if the key was never set. An empty
            map is a stored value, not a miss.
        """
        ...

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any earlier value."""
        ...

    @abstractmethod
    async def size(self) -> int:
        """Number of WalletLink entries currently stored."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the store."""
        ...

    @abstractmethod
    async def ping(self) -> bool:
        """True if the backend can serve lookups."""
        ...

    def transfers_key(self, address: str) -> str:
        """Key for an address's counterparty map.

        The address must already be in its chain's canonical form; case is
        kept because Solana addresses are case-sensitive.
        """
        return f"{CACHE_KEY_PREFIX}:transfers:{address}"
