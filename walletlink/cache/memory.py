"""In-memory cache backend implementation."""

import asyncio
from typing import Any

from walletlink.constants import CACHE_KEY_PREFIX
from walletlink.core.cache import CacheBackend


class MemoryCacheBackend(CacheBackend):
    """Process-local backend; entries live as long as the process."""

    def __init__(self) -> None:
        self._store: dict[str, Any] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Any | None:
        async with self._lock:
            return self._store.get(key)

    async def set(self, key: str, value: Any) -> None:
        async with self._lock:
            self._store[key] = value

    async def size(self) -> int:
        async with self._lock:
            return sum(1 for k in self._store if k.startswith(f"{CACHE_KEY_PREFIX}:"))

    async def close(self) -> None:
        """Drop every stored entry."""
        async with self._lock:
            self._store.clear()

    async def ping(self) -> bool:
        """Memory cache is always available."""
        return True
