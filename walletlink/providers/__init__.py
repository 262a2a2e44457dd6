"""Transfer-history providers package."""

from walletlink.providers.base import HTTPTransferSource
from walletlink.providers.etherscan import EtherscanTransferSource
from walletlink.providers.helius import HeliusTransferSource

__all__ = [
    "EtherscanTransferSource",
    "HTTPTransferSource",
    "HeliusTransferSource",
]
