"""Test configuration and fixtures."""

import asyncio
from typing import Callable

import pytest

from walletlink.cache.memory import MemoryCacheBackend
from walletlink.constants import Chain, TransferRole
from walletlink.core.exceptions import TransferSourceError
from walletlink.core.provider import ProgressCallback, TransferSource
from walletlink.models.relationship import TransferEdge
from walletlink.services.relationship_search import RelationshipSearchService
from walletlink.services.transfer_cache import TransferLookupCache


class FakeTransferSource(TransferSource):
    """In-memory transfer source that records every fetch."""

    def __init__(
        self,
        graph: dict[str, dict[str, TransferEdge]] | None = None,
        chain: Chain = Chain.SOLANA,
        failing: set[str] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self._graph = graph or {}
        self._chain = chain
        self._failing = failing or set()
        self._delays = delays or {}
        self.calls: list[str] = []
        self.closed = False

    @classmethod
    def from_transfers(
        cls, transfers: list[tuple[str, str, str]], **kwargs
    ) -> "FakeTransferSource":
        """Build both directions of each ``(sender, receiver, tx)`` transfer."""
        graph: dict[str, dict[str, TransferEdge]] = {}
        for sender, receiver, tx in transfers:
            graph.setdefault(sender, {})[receiver] = TransferEdge(
                counterparty=receiver, tx_ref=tx, role=TransferRole.SENT_TO
            )
            graph.setdefault(receiver, {})[sender] = TransferEdge(
                counterparty=sender, tx_ref=tx, role=TransferRole.RECEIVED_FROM
            )
        return cls(graph, **kwargs)

    @property
    def name(self) -> str:
        return "fake"

    @property
    def chain(self) -> Chain:
        return self._chain

    async def fetch_transfers(
        self,
        address: str,
        progress: ProgressCallback | None = None,
    ) -> dict[str, TransferEdge]:
        self.calls.append(address)
        delay = self._delays.get(address)
        if delay:
            await asyncio.sleep(delay)
        if address in self._failing:
            raise TransferSourceError(f"lookup failed for {address}", self.name)
        return dict(self._graph.get(address, {}))

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_search() -> Callable[..., tuple[RelationshipSearchService, FakeTransferSource]]:
    """Build a search service over a fake Solana source from a transfer list."""

    def _make(
        transfers: list[tuple[str, str, str]] | None = None,
        graph: dict[str, dict[str, TransferEdge]] | None = None,
        max_concurrent_fetches: int = 4,
        **source_kwargs,
    ) -> tuple[RelationshipSearchService, FakeTransferSource]:
        if graph is not None:
            source = FakeTransferSource(graph, **source_kwargs)
        else:
            source = FakeTransferSource.from_transfers(transfers or [], **source_kwargs)
        lookup_cache = TransferLookupCache(
            backend=MemoryCacheBackend(), sources={source.chain: source}
        )
        service = RelationshipSearchService(
            lookup_cache=lookup_cache,
            default_hop_budget=2,
            max_hop_budget=10,
            max_concurrent_fetches=max_concurrent_fetches,
        )
        return service, source

    return _make
