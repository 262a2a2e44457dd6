"""Dependency injection for FastAPI."""

from typing import Annotated

from fastapi import Depends

from walletlink.cache.memory import MemoryCacheBackend
from walletlink.config import Settings, get_settings
from walletlink.constants import Chain
from walletlink.core.cache import CacheBackend
from walletlink.core.provider import TransferSource
from walletlink.providers.etherscan import EtherscanTransferSource
from walletlink.providers.helius import HeliusTransferSource
from walletlink.services.relationship_search import RelationshipSearchService
from walletlink.services.transfer_cache import TransferLookupCache


_cache_instance: CacheBackend | None = None
_sources: dict[Chain, TransferSource] | None = None
_lookup_cache: TransferLookupCache | None = None


def get_cache_backend() -> CacheBackend:
    """Get or create the process-wide cache backend."""
    global _cache_instance

    if _cache_instance is None:
        _cache_instance = MemoryCacheBackend()

    return _cache_instance


def get_transfer_sources(
    settings: Annotated[Settings, Depends(get_settings)]
) -> dict[Chain, TransferSource]:
    """Get or create one transfer source per supported chain."""
    global _sources

    if _sources is None:
        shared = {
            "max_retries": settings.provider_max_retries,
            "retry_delay": settings.provider_retry_delay,
            "timeout": settings.provider_timeout,
        }
        _sources = {
            Chain.SOLANA: HeliusTransferSource(
                api_key=settings.helius_api_key.get_secret_value(),
                base_url=settings.helius_base_url,
                page_size=settings.helius_page_size,
                max_pages=settings.helius_max_pages,
                page_delay=settings.helius_page_delay,
                requests_per_second=settings.helius_requests_per_second,
                **shared,
            ),
            Chain.ETHEREUM: EtherscanTransferSource(
                api_key=settings.etherscan_api_key.get_secret_value(),
                base_url=settings.etherscan_base_url,
                page_size=settings.etherscan_page_size,
                max_pages=settings.etherscan_max_pages,
                requests_per_second=settings.etherscan_requests_per_second,
                **shared,
            ),
        }

    return _sources


def get_lookup_cache(
    cache: Annotated[CacheBackend, Depends(get_cache_backend)],
    sources: Annotated[dict[Chain, TransferSource], Depends(get_transfer_sources)],
) -> TransferLookupCache:
    """Get or create the lookup cache shared by every search."""
    global _lookup_cache

    if _lookup_cache is None:
        _lookup_cache = TransferLookupCache(backend=cache, sources=sources)

    return _lookup_cache


def get_search_service(
    lookup_cache: Annotated[TransferLookupCache, Depends(get_lookup_cache)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> RelationshipSearchService:
    """Get a relationship search service bound to the shared cache."""
    return RelationshipSearchService(
        lookup_cache=lookup_cache,
        default_hop_budget=settings.default_hop_budget,
        max_hop_budget=settings.max_hop_budget,
        max_concurrent_fetches=settings.max_concurrent_fetches,
    )


async def cleanup_dependencies() -> None:
    """Cleanup dependency instances on shutdown."""
    global _cache_instance, _sources, _lookup_cache

    if _sources:
        for source in _sources.values():
            await source.close()
        _sources = None

    if _cache_instance:
        await _cache_instance.close()
        _cache_instance = None

    _lookup_cache = None
