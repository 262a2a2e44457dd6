"""Tests for cache backends and the transfer lookup cache."""

import asyncio

import pytest
import pytest_asyncio

from conftest import FakeTransferSource
from walletlink.cache.memory import MemoryCacheBackend
from walletlink.constants import Chain, TransferRole
from walletlink.core.exceptions import UnsupportedChainError
from walletlink.services.transfer_cache import TransferLookupCache


class TestMemoryCacheBackend:
    """Tests for MemoryCacheBackend."""

    @pytest_asyncio.fixture
    async def cache(self) -> MemoryCacheBackend:
        """Provide a fresh memory cache for each test."""
        return MemoryCacheBackend()

    @pytest.mark.asyncio
    async def test_set_and_get(self, cache: MemoryCacheBackend) -> None:
        """Test basic set and get operations."""
        await cache.set("test_key", {"data": "value"})
        result = await cache.get("test_key")

        assert result == {"data": "value"}

    @pytest.mark.asyncio
    async def test_get_nonexistent(self, cache: MemoryCacheBackend) -> None:
        """Test getting a nonexistent key."""
        result = await cache.get("nonexistent")

        assert result is None

    @pytest.mark.asyncio
    async def test_empty_value_is_stored(self, cache: MemoryCacheBackend) -> None:
        """An empty result is a hit, not a miss."""
        await cache.set("walletlink:transfers:x", {})

        assert await cache.get("walletlink:transfers:x") == {}

    @pytest.mark.asyncio
    async def test_size_counts_walletlink_keys(self, cache: MemoryCacheBackend) -> None:
        """Test only WalletLink keys are counted."""
        await cache.set(cache.transfers_key("A"), {})
        await cache.set(cache.transfers_key("B"), {})
        await cache.set("other:key", "value")

        assert await cache.size() == 2

    @pytest.mark.asyncio
    async def test_close_drops_entries(self, cache: MemoryCacheBackend) -> None:
        """Test closing the backend releases its entries."""
        await cache.set(cache.transfers_key("A"), {})
        await cache.close()

        assert await cache.size() == 0
        assert await cache.get(cache.transfers_key("A")) is None

    @pytest.mark.asyncio
    async def test_ping(self, cache: MemoryCacheBackend) -> None:
        """Test ping operation."""
        assert await cache.ping() is True

    def test_transfers_key_keeps_case(self, cache: MemoryCacheBackend) -> None:
        """Solana keys are case-sensitive, so the key helper must not fold case."""
        assert cache.transfers_key("AbC") == "walletlink:transfers:AbC"
        assert cache.transfers_key("AbC") != cache.transfers_key("abc")


class TestTransferLookupCache:
    """Tests for TransferLookupCache."""

    @pytest.fixture
    def source(self) -> FakeTransferSource:
        return FakeTransferSource.from_transfers([("A", "X", "tx1"), ("Y", "A", "tx2")])

    @pytest.fixture
    def lookup(self, source: FakeTransferSource) -> TransferLookupCache:
        return TransferLookupCache(
            backend=MemoryCacheBackend(), sources={Chain.SOLANA: source}
        )

    @pytest.mark.asyncio
    async def test_miss_then_hit(self, lookup: TransferLookupCache, source: FakeTransferSource) -> None:
        """The second lookup is served without calling the source."""
        first = await lookup.get("A", Chain.SOLANA)
        second = await lookup.get("A", Chain.SOLANA)

        assert set(first) == {"X", "Y"}
        assert first["X"].role is TransferRole.SENT_TO
        assert first["Y"].role is TransferRole.RECEIVED_FROM
        assert second == first
        assert source.calls == ["A"]
        assert await lookup.stats() == {"hits": 1, "misses": 1, "failures": 0, "entries": 1}

    @pytest.mark.asyncio
    async def test_empty_result_cached(self, lookup: TransferLookupCache, source: FakeTransferSource) -> None:
        """An address with no transfers is stored and not fetched again."""
        assert await lookup.get("nobody", Chain.SOLANA) == {}
        assert await lookup.get("nobody", Chain.SOLANA) == {}

        assert source.calls == ["nobody"]

    @pytest.mark.asyncio
    async def test_failure_absorbed_and_cached(self) -> None:
        """A failing source reads as no connections and is never retried."""
        source = FakeTransferSource.from_transfers([("A", "X", "tx1")], failing={"A"})
        lookup = TransferLookupCache(backend=MemoryCacheBackend(), sources={Chain.SOLANA: source})

        assert await lookup.get("A", Chain.SOLANA) == {}
        assert await lookup.get("A", Chain.SOLANA) == {}

        assert source.calls == ["A"]
        stats = await lookup.stats()
        assert stats["failures"] == 1

    @pytest.mark.asyncio
    async def test_concurrent_lookups_fetch_once(self) -> None:
        """Concurrent lookups of one address share a single fetch."""
        source = FakeTransferSource.from_transfers([("A", "X", "tx1")], delays={"A": 0.05})
        lookup = TransferLookupCache(backend=MemoryCacheBackend(), sources={Chain.SOLANA: source})

        results = await asyncio.gather(*(lookup.get("A", Chain.SOLANA) for _ in range(5)))

        assert all(r == results[0] for r in results)
        assert set(results[0]) == {"X"}
        assert source.calls == ["A"]

    @pytest.mark.asyncio
    async def test_unknown_chain(self, lookup: TransferLookupCache) -> None:
        """Test a chain without a registered source."""
        with pytest.raises(UnsupportedChainError):
            await lookup.get("0xabc", Chain.ETHEREUM)

    @pytest.mark.asyncio
    async def test_locks_released_after_fill(self, lookup: TransferLookupCache) -> None:
        """Per-address locks do not accumulate once entries are stored."""
        for i in range(50):
            await lookup.get(f"addr{i}", Chain.SOLANA)

        assert lookup._key_locks == {}
        assert (await lookup.stats())["entries"] == 50

    @pytest.mark.asyncio
    async def test_concurrent_fill_releases_lock(self) -> None:
        """Waiters on an in-flight fetch still share its result after the lock is dropped."""
        source = FakeTransferSource.from_transfers([("A", "X", "tx1")], delays={"A": 0.05})
        lookup = TransferLookupCache(backend=MemoryCacheBackend(), sources={Chain.SOLANA: source})

        await asyncio.gather(*(lookup.get("A", Chain.SOLANA) for _ in range(3)))
        await lookup.get("A", Chain.SOLANA)

        assert source.calls == ["A"]
        assert lookup._key_locks == {}
