"""Core module for base interfaces and abstractions."""

from walletlink.core.cache import CacheBackend
from walletlink.core.exceptions import (
    APIRateLimitError,
    APITimeoutError,
    InvalidAddressError,
    SearchInvariantError,
    TransferSourceError,
    UnsupportedChainError,
    WalletLinkError,
)
from walletlink.core.provider import ProgressCallback, TransferSource

__all__ = [
    "APIRateLimitError",
    "APITimeoutError",
    "CacheBackend",
    "InvalidAddressError",
    "ProgressCallback",
    "SearchInvariantError",
    "TransferSource",
    "TransferSourceError",
    "UnsupportedChainError",
    "WalletLinkError",
]
