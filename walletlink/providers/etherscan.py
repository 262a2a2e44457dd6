"""Etherscan API provider for Ethereum token transfer history."""

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


class EtherscanTransferSource(HTTPTransferSource):
    """Ethereum ERC-20 transfer history from the Etherscan ``tokentx`` endpoint."""

    def __init__(
        self,
        api_key: str = "",
        base_url: str = "https://api.etherscan.io/api",
        page_size: int = 100,
        max_pages: int = 2,
        **kwargs: Any,
    ) -> None:
        super().__init__(base_url=base_url, **kwargs)
        self._api_key = api_key
        self._page_size = page_size
        self._max_pages = max_pages

    @property
    def name(self) -> str:
        return "etherscan"

    @property
    def chain(self) -> Chain:
        return Chain.ETHEREUM

    @staticmethod
    def _list_result(data: Any) -> list[dict[str, Any]]:
        # Etherscan reports "no transactions" and errors as a string result
        res = data.get("result") if isinstance(data, dict) else None
        return res if isinstance(res, list) else []

    async def fetch_transfers(
        self,
        address: str,
        progress: ProgressCallback | None = None,
    ) -> dict[str, TransferEdge]:
        """Fetch counterparties of an Ethereum address, newest transfers first."""
        address = self.canonical(address)
        connections: dict[str, TransferEdge] = {}

        for page in range(1, self._max_pages + 1):
            await self._report(
                progress, f"Scanning {shorten_address(address)} (Page {page})...", address
            )
            params = {
                "module": "account",
                "action": "tokentx",
                "address": address,
                "page": page,
                "offset": self._page_size,
                "sort": "desc",
                "apikey": self._api_key,
            }
            try:
                data = await self._get_json(self._base_url, params=params)
            except (TransferSourceError, httpx.HTTPError) as e:
                if page == 1:
                    raise
                logger.warning(
                    f"[Etherscan] Stopping at page {page} for {address}: {e}. "
                    f"Keeping {len(connections)} counterparties"
                )
                break

            rows = self._list_result(data)
            if not rows:
                break

            for row in rows:
                sender = (row.get("from") or "").lower()
                recipient = (row.get("to") or "").lower()
                is_sender = sender == address
                other = recipient if is_sender else sender
                if not other or other == address:
                    continue
                connections[other] = TransferEdge(
                    counterparty=other,
                    tx_ref=row.get("hash", ""),
                    role=TransferRole.SENT_TO if is_sender else TransferRole.RECEIVED_FROM,
                )

            if len(rows) < self._page_size:
                break

        logger.info(f"[Etherscan] {address}: {len(connections)} counterparties")
        return connections
