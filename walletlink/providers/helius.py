"""Helius API provider for Solana transfer history."""

import asyncio
import logging
from typing import Any

import httpx

from walletlink.constants import Chain, TransferRole
from walletlink.core.exceptions import TransferSourceError
from walletlink.core.provider import ProgressCallback
from walletlink.models.relationship import TransferEdge
from walletlink.providers.base import HTTPTransferSource
from walletlink.utils import shorten_address

logger = logging.getLogger(__name__)


class HeliusTransferSource(HTTPTransferSource):
    """
    Solana transfer history from the Helius enhanced transactions API.

    Native SOL and SPL token transfers are both counted. Pages are walked
    newest first using the last seen signature as the ``before`` cursor.
    """

    def __init__(
        self,
        api_key: str = "",
        base_url: str = "https://api.helius.xyz",
        page_size: int = 100,
        max_pages: int = 10,
        page_delay: float = 0.3,
        **kwargs: Any,
    ) -> None:
        super().__init__(base_url=base_url, **kwargs)
        self._api_key = api_key
        self._page_size = page_size
        self._max_pages = max_pages
        self._page_delay = page_delay

    @property
    def name(self) -> str:
        return "helius"

    @property
    def chain(self) -> Chain:
        return Chain.SOLANA

    async def fetch_transfers(
        self,
        address: str,
        progress: ProgressCallback | None = None,
    ) -> dict[str, TransferEdge]:
        """Fetch counterparties of a Solana address, up to ``max_pages`` pages."""
        address = self.canonical(address)
        connections: dict[str, TransferEdge] = {}
        url = f"{self._base_url}/v0/addresses/{address}/transactions"
        before: str | None = None

        for page in range(1, self._max_pages + 1):
            await self._report(
                progress, f"Scanning {shorten_address(address)} (Page {page})...", address
            )
            params: dict[str, Any] = {"api-key": self._api_key, "limit": self._page_size}
            if before:
                params["before"] = before

            try:
                data = await self._get_json(url, params=params)
            except (TransferSourceError, httpx.HTTPError) as e:
                if page == 1:
                    raise
                logger.warning(
                    f"[Helius] Stopping at page {page} for {address}: {e}. "
                    f"Keeping {len(connections)} counterparties"
                )
                break

            if self._page_delay:
                await asyncio.sleep(self._page_delay)

            if not isinstance(data, list) or not data:
                break

            for tx in data:
                signature = tx.get("signature")
                if not signature:
                    continue
                self._collect(address, signature, tx, connections)
                before = signature

            if len(data) < self._page_size:
                break

        logger.info(f"[Helius] {address}: {len(connections)} counterparties")
        return connections

    def _collect(
        self,
        address: str,
        signature: str,
        tx: dict[str, Any],
        connections: dict[str, TransferEdge],
    ) -> None:
        transfers = (tx.get("nativeTransfers") or []) + (tx.get("tokenTransfers") or [])
        for transfer in transfers:
            sender = transfer.get("fromUserAccount")
            is_sender = sender == address
            other = transfer.get("toUserAccount") if is_sender else sender
            if not other or other == address:
                continue
            connections[other] = TransferEdge(
                counterparty=other,
                tx_ref=signature,
                role=TransferRole.SENT_TO if is_sender else TransferRole.RECEIVED_FROM,
            )
