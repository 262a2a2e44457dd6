"""Cache implementations package."""

from walletlink.cache.memory import MemoryCacheBackend

__all__ = [
    "MemoryCacheBackend",
]
