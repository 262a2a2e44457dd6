"""Process-wide lookup cache in front of the transfer sources."""

import asyncio
import logging
from dataclasses import dataclass

from walletlink.constants import Chain
from walletlink.core.cache import CacheBackend
from walletlink.core.exceptions import UnsupportedChainError
from walletlink.core.provider import ProgressCallback, TransferSource
from walletlink.models.relationship import TransferEdge

logger = logging.getLogger(__name__)


@dataclass
class CacheStats:
    """Counters for lookups served since the process started."""

    hits: int = 0
    misses: int = 0
    failures: int = 0


class TransferLookupCache:
    """
    Memoizes transfer-source results per address.

    Entries are never evicted or refreshed. A failed fetch is stored as an
    empty result so it reads as "no further connections" rather than an
    error, and is not retried for the lifetime of the process.
    """

    def __init__(
        self,
        backend: CacheBackend,
        sources: dict[Chain, TransferSource],
    ) -> None:
        """
        Initialize the lookup cache.

        Args:
            backend: Storage for the counterparty maps.
            sources: Transfer source per supported chain.
        """
        self._backend = backend
        self._sources = sources
        self._key_locks: dict[str, asyncio.Lock] = {}
        self._stats = CacheStats()

    def source_for(self, chain: Chain) -> TransferSource:
        try:
            return self._sources[chain]
        except KeyError:
            raise UnsupportedChainError(chain.value) from None

    async def get(
        self,
        address: str,
        chain: Chain,
        progress: ProgressCallback | None = None,
    ) -> dict[str, TransferEdge]:
        """
        Return the counterparty map for a canonical address.

        Args:
            address: Address already in its chain's canonical form.
            chain: Chain used to pick the transfer source on a miss.
            progress: Forwarded to the transfer source on a miss.

        Returns:
            Mapping of counterparty to edge, possibly empty.
        """
        key = self._backend.transfers_key(address)

        cached = await self._backend.get(key)
        if cached is not None:
            self._stats.hits += 1
            return cached

        # setdefault is atomic within the event loop, so one lock per key
        lock = self._key_locks.setdefault(key, asyncio.Lock())
        async with lock:
            cached = await self._backend.get(key)
            if cached is not None:
                self._stats.hits += 1
                return cached

            self._stats.misses += 1
            source = self.source_for(chain)
            try:
                connections = await source.fetch_transfers(address, progress=progress)
            except Exception as e:
                self._stats.failures += 1
                logger.warning(
                    f"Transfer lookup failed for {address} via {source.name}: {e}. "
                    f"Treating as no connections"
                )
                connections = {}

            await self._backend.set(key, connections)
            # Later lookups take the fast path; waiters already hold this lock object
            self._key_locks.pop(key, None)
            return connections

    async def stats(self) -> dict[str, int]:
        return {
            "hits": self._stats.hits,
            "misses": self._stats.misses,
            "failures": self._stats.failures,
            "entries": await self._backend.size(),
        }

