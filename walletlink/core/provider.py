"""Abstract transfer source interface."""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable

from walletlink.constants import Chain, canonical_address
from walletlink.models.relationship import ProgressEvent, TransferEdge

ProgressCallback = Callable[[ProgressEvent], Awaitable[None]]


class TransferSource(ABC):
    """Abstract base class for per-chain transfer-history providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier."""
        ...

    @property
    @abstractmethod
    def chain(self) -> Chain:
        """The chain this source reads."""
        ...

    @abstractmethod
    async def fetch_transfers(
        self,
        address: str,
        progress: ProgressCallback | None = None,
    ) -> dict[str, TransferEdge]:
        """
        Collect every counterparty that sent to or received from an address.

        Args:
            address: Canonical address to look up.
            progress: Optional callback for per-page progress.

        Returns:
            Mapping of canonical counterparty address to one representative
            edge (last write wins). The queried address itself is never a key.
            When the provider fails part-way, whatever was gathered so far is
            returned.

        Raises:
            TransferSourceError: Only when nothing could be fetched at all.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the provider and release resources."""
        ...

    def canonical(self, address: str) -> str:
        """Canonical form of an address on this source's chain."""
        return canonical_address(self.chain, address)
