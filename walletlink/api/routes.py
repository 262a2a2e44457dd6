"""API route definitions."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from walletlink.api.dependencies import (
    get_cache_backend,
    get_lookup_cache,
    get_search_service,
)
from walletlink.config import Settings, get_settings
from walletlink.constants import SUPPORTED_CHAINS
from walletlink.core.cache import CacheBackend
from walletlink.core.exceptions import InvalidAddressError, WalletLinkError
from walletlink.models.relationship import (
    HealthResponse,
    RelationshipConclusion,
    RelationshipRequest,
)
from walletlink.services.conclusion import build_conclusion
from walletlink.services.relationship_search import RelationshipSearchService
from walletlink.services.transfer_cache import TransferLookupCache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["relationship"])


@router.post(
    "/relationship",
    response_model=RelationshipConclusion,
    summary="Check Wallet Relationship",
    description=(
        "Search for a chain of transfers linking two wallet addresses. Hop budgets "
        "above the configured maximum are clamped; the response reports the "
        "budget actually used in `hop_budget`."
    ),
)
async def check_relationship(
    request: RelationshipRequest,
    search: Annotated[RelationshipSearchService, Depends(get_search_service)],
) -> RelationshipConclusion:
    """
    Run a bidirectional search between two addresses.

    - **address_a**: First wallet (Solana or Ethereum)
    - **address_b**: Second wallet, on the same chain
    - **max_hops**: Hop budget (default: 2, clamped to the server maximum)

    The response's ``hop_budget`` is the budget the search actually ran with.
    """
    try:
        result = await search.find_relationship(
            request.address_a,
            request.address_b,
            hop_budget=request.max_hops,
        )
        return build_conclusion(result)

    except InvalidAddressError as e:
        logger.warning(f"Rejected relationship request: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )

    except WalletLinkError as e:
        logger.error(f"WalletLink error: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message,
        )

    except Exception as e:
        logger.exception(f"Unexpected error during relationship search: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred during the search",
        )


@router.get(
    "/chains",
    summary="List Supported Chains",
    description="Get the chains a relationship search can walk.",
)
async def list_supported_chains() -> JSONResponse:
    """List supported blockchain networks."""
    chains = [
        {
            "slug": config.slug,
            "name": config.name,
            "symbol": config.symbol,
            "case_sensitive": config.case_sensitive,
            "explorer": config.tx_explorer_base,
        }
        for config in SUPPORTED_CHAINS.values()
    ]
    return JSONResponse(content={"chains": chains, "count": len(chains)})


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Check API and cache health status.",
)
async def health_check(
    cache: Annotated[CacheBackend, Depends(get_cache_backend)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """Check API health and cache availability."""
    cache_healthy = await cache.ping()

    return HealthResponse(
        status="healthy" if cache_healthy else "degraded",
        version=settings.app_version,
        cache_status="connected" if cache_healthy else "disconnected",
    )


@router.get(
    "/cache/stats",
    summary="Lookup Cache Statistics",
    description="Hits, misses and degraded lookups since the process started.",
)
async def cache_stats(
    lookup_cache: Annotated[TransferLookupCache, Depends(get_lookup_cache)],
) -> JSONResponse:
    """Report lookup cache counters."""
    return JSONResponse(content=await lookup_cache.stats())
