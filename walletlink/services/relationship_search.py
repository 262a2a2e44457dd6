"""Bidirectional frontier search between two wallet addresses."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from walletlink.constants import Chain, canonical_address
from walletlink.core.exceptions import InvalidAddressError
from walletlink.core.provider import ProgressCallback
from walletlink.models.relationship import (
    ProgressEvent,
    SearchResult,
    SearchSide,
    SpamNote,
    TransferEdge,
    VisitedRecord,
)
from walletlink.services.chain_classifier import identify_chain, is_ethereum_address
from walletlink.services.path_builder import reconstruct_path
from walletlink.services.spam_classifier import classify_collision
from walletlink.services.transfer_cache import TransferLookupCache
from walletlink.utils import shorten_address

logger = logging.getLogger(__name__)


@dataclass
class SearchState:
    """Per-request state: one visited tree and one frontier per side."""

    visited: dict[SearchSide, dict[str, VisitedRecord]] = field(default_factory=dict)
    frontier: dict[SearchSide, list[str]] = field(default_factory=dict)
    spam_notes: list[SpamNote] = field(default_factory=list)
    meeting_point: str | None = None
    steps_taken: int = 0

    @classmethod
    def seeded(cls, seed_a: str, seed_b: str) -> "SearchState":
        return cls(
            visited={
                SearchSide.A: {seed_a: VisitedRecord()},
                SearchSide.B: {seed_b: VisitedRecord()},
            },
            frontier={SearchSide.A: [seed_a], SearchSide.B: [seed_b]},
        )

    @property
    def exhausted(self) -> bool:
        return not self.frontier[SearchSide.A] and not self.frontier[SearchSide.B]


class RelationshipSearchService:
    """
    Finds whether two addresses are linked by real transfers.

    Both addresses grow a breadth-first tree, one layer per step, with odd
    steps expanding side A and even steps side B. The first address reached
    by both trees ends the search unless both sides only received from it,
    in which case it is noted as spam and the search goes on.
    """

    DEFAULT_HOP_BUDGET = 2
    DEFAULT_MAX_HOP_BUDGET = 10
    DEFAULT_MAX_CONCURRENT_FETCHES = 4

    def __init__(
        self,
        lookup_cache: TransferLookupCache,
        default_hop_budget: int = DEFAULT_HOP_BUDGET,
        max_hop_budget: int = DEFAULT_MAX_HOP_BUDGET,
        max_concurrent_fetches: int = DEFAULT_MAX_CONCURRENT_FETCHES,
    ) -> None:
        """
        Initialize the search service.

        Args:
            lookup_cache: Shared cache in front of the transfer sources.
            default_hop_budget: Budget used when none or an invalid one is given.
            max_hop_budget: Larger budgets are clamped to this.
            max_concurrent_fetches: Frontier lookups allowed in flight at once.
        """
        self._lookup_cache = lookup_cache
        self._default_hop_budget = default_hop_budget
        self._max_hop_budget = max_hop_budget
        self._max_concurrent_fetches = max(1, max_concurrent_fetches)

    def resolve_hop_budget(self, hop_budget: Any) -> int:
        """Return a usable hop budget; missing, invalid or non-positive values give the default."""
        if isinstance(hop_budget, bool) or not isinstance(hop_budget, int) or hop_budget < 1:
            return self._default_hop_budget
        if hop_budget > self._max_hop_budget:
            logger.warning(
                f"Hop budget {hop_budget} exceeds maximum, clamping to {self._max_hop_budget}"
            )
            return self._max_hop_budget
        return hop_budget

    def resolve_seeds(
        self,
        address_a: str,
        address_b: str,
        chain: Chain | None = None,
    ) -> tuple[Chain, str, str]:
        """
        Validate both addresses and bring them to canonical form.

        Raises:
            InvalidAddressError: If an address is blank, is neither a Solana
                public key nor a hex Ethereum address, or the two addresses
                belong to different chains.
        """
        for address in (address_a, address_b):
            if not isinstance(address, str) or not address.strip():
                raise InvalidAddressError(str(address), "Address must be a non-empty string")
            if any(c.isspace() for c in address.strip()):
                raise InvalidAddressError(address, "Address must not contain whitespace")

        if chain is None:
            chain = identify_chain(address_a)
            chain_b = identify_chain(address_b)
        else:
            chain_b = chain

        # Solana is only ever inferred from a valid key; the fallback chain needs its own check
        for address, address_chain in ((address_a, chain), (address_b, chain_b)):
            if address_chain is Chain.ETHEREUM and not is_ethereum_address(address.strip()):
                raise InvalidAddressError(
                    address, "Address is neither a Solana public key nor a 0x-prefixed Ethereum address"
                )

        if chain_b is not chain:
            raise InvalidAddressError(
                address_b,
                f"Address is on {chain_b.value} but the first address is on {chain.value}",
            )

        return chain, canonical_address(chain, address_a), canonical_address(chain, address_b)

    async def find_relationship(
        self,
        address_a: str,
        address_b: str,
        hop_budget: Any = None,
        chain: Chain | None = None,
        progress: ProgressCallback | None = None,
    ) -> SearchResult:
        """
        Search for a transfer path between two addresses.

        Args:
            address_a: First seed address.
            address_b: Second seed address.
            hop_budget: Maximum number of expansion steps.
            chain: Chain to search; classified from the addresses if omitted.
            progress: Optional callback receiving ProgressEvents.

        Returns:
            SearchResult with the meeting point and evidence chain if found,
            and any spam notes collected either way.

        Raises:
            InvalidAddressError: If the seeds are rejected.
            SearchInvariantError: If the visited trees become inconsistent.
        """
        budget = self.resolve_hop_budget(hop_budget)
        chain, seed_a, seed_b = self.resolve_seeds(address_a, address_b, chain)

        if seed_a == seed_b:
            logger.info(f"Seeds are identical ({seed_a}), zero-hop match")
            return SearchResult(
                found=True, chain=chain, meeting_point=seed_a, hop_budget=budget
            )

        await self._emit(
            progress,
            ProgressEvent(message=f"Tracing path (Max Depth: {budget} Hops)...", transient=False),
        )

        state = SearchState.seeded(seed_a, seed_b)
        for step in range(1, budget + 1):
            side = SearchSide.for_step(step)
            state.steps_taken = step
            await self._expand_side(state, side, step, chain, progress)
            if state.meeting_point is not None or state.exhausted:
                break

        logger.info(
            f"Search {seed_a} <-> {seed_b} on {chain.value}: "
            f"meeting_point={state.meeting_point}, steps={state.steps_taken}, "
            f"spam_notes={len(state.spam_notes)}"
        )

        if state.meeting_point is None:
            return SearchResult(
                found=False,
                chain=chain,
                spam_notes=state.spam_notes,
                hop_budget=budget,
                steps_taken=state.steps_taken,
            )

        evidence = reconstruct_path(
            state.visited[SearchSide.A], state.visited[SearchSide.B], state.meeting_point
        )
        return SearchResult(
            found=True,
            chain=chain,
            meeting_point=state.meeting_point,
            evidence=evidence,
            spam_notes=state.spam_notes,
            hop_budget=budget,
            steps_taken=state.steps_taken,
        )

    async def _expand_side(
        self,
        state: SearchState,
        side: SearchSide,
        step: int,
        chain: Chain,
        progress: ProgressCallback | None,
    ) -> None:
        """Expand one side's frontier by one layer, stopping at a meeting point."""
        frontier = state.frontier[side]
        mine = state.visited[side]
        theirs = state.visited[side.other]
        next_frontier: list[str] = []

        neighbor_maps = await self._fetch_frontier(frontier, side, step, chain, progress)

        # Results are consumed in frontier order so the outcome never depends on fetch timing
        for current, neighbors in zip(frontier, neighbor_maps):
            for neighbor, edge in neighbors.items():
                neighbor = canonical_address(chain, neighbor)
                if neighbor == current or neighbor in mine:
                    continue

                mine[neighbor] = VisitedRecord(parent=current, tx_ref=edge.tx_ref, role=edge.role)
                next_frontier.append(neighbor)

                if neighbor not in theirs:
                    continue

                visited_a, visited_b = state.visited[SearchSide.A], state.visited[SearchSide.B]
                note = classify_collision(neighbor, visited_a, visited_b)
                if note is not None:
                    logger.info(f"Spam coincidence at {neighbor}: both seeds received from it")
                    state.spam_notes.append(note)
                    continue

                state.meeting_point = neighbor
                state.frontier[side] = next_frontier
                return

        state.frontier[side] = next_frontier

    async def _fetch_frontier(
        self,
        frontier: list[str],
        side: SearchSide,
        step: int,
        chain: Chain,
        progress: ProgressCallback | None,
    ) -> list[dict[str, TransferEdge]]:
        """Look up every frontier address, a bounded number at a time."""
        semaphore = asyncio.Semaphore(self._max_concurrent_fetches)

        async def fetch(address: str) -> dict[str, TransferEdge]:
            async with semaphore:
                await self._emit(
                    progress,
                    ProgressEvent(
                        message=f"Scanning {shorten_address(address)} (Step {step}, Side {side.value})...",
                        step=step,
                        side=side,
                        address=address,
                    ),
                )
                return await self._lookup_cache.get(address, chain, progress=progress)

        tasks = [asyncio.ensure_future(fetch(address)) for address in frontier]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    @staticmethod
    async def _emit(progress: ProgressCallback | None, event: ProgressEvent) -> None:
        if progress is None:
            return
        try:
            await progress(event)
        except Exception as e:
            logger.debug(f"Progress callback failed: {e}")
