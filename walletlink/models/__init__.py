"""Domain models package."""

from walletlink.models.relationship import (
    EvidenceItem,
    EvidenceStep,
    HealthResponse,
    ProgressEvent,
    RelationshipConclusion,
    RelationshipRequest,
    SearchResult,
    SearchSide,
    SpamNote,
    SpamNoteItem,
    TransferEdge,
    VisitedRecord,
)

__all__ = [
    "EvidenceItem",
    "EvidenceStep",
    "HealthResponse",
    "ProgressEvent",
    "RelationshipConclusion",
    "RelationshipRequest",
    "SearchResult",
    "SearchSide",
    "SpamNote",
    "SpamNoteItem",
    "TransferEdge",
    "VisitedRecord",
]
