"""Services package."""

from walletlink.services.relationship_search import RelationshipSearchService
from walletlink.services.transfer_cache import TransferLookupCache

__all__ = [
    "RelationshipSearchService",
    "TransferLookupCache",
]
