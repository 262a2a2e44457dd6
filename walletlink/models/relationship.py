"""Relationship search domain models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from walletlink.constants import Chain, TransferRole


class TransferEdge(BaseModel):
    """A counterparty seen in an address's transfer history."""

    model_config = ConfigDict(frozen=True)

    counterparty: str
    tx_ref: str
    role: TransferRole


class SearchSide(str, Enum):
    """The two search trees, expanded in strict alternation."""

    A = "A"
    B = "B"

    @classmethod
    def for_step(cls, step: int) -> "SearchSide":
        """Odd steps expand side A, even steps expand side B."""
        return cls.A if step % 2 else cls.B

    @property
    def other(self) -> "SearchSide":
        return SearchSide.B if self is SearchSide.A else SearchSide.A


class VisitedRecord(BaseModel):
    """How an address was first reached on one side of the search."""

    model_config = ConfigDict(frozen=True)

    parent: str | None = None
    tx_ref: str | None = None
    role: TransferRole | None = None

    @property
    def is_seed(self) -> bool:
        return self.parent is None


class SpamNote(BaseModel):
    """A collision where both seeds only received from the same address."""

    address: str
    tx_ref_a: str | None = None
    tx_ref_b: str | None = None


class EvidenceStep(BaseModel):
    """One directed transfer in the evidence chain."""

    sender: str
    receiver: str
    tx_ref: str

    def render(self) -> str:
        return f"{self.sender} → {self.receiver}"


class SearchResult(BaseModel):
    """Outcome of one bidirectional search."""

    found: bool
    chain: Chain
    meeting_point: str | None = None
    evidence: list[EvidenceStep] = Field(default_factory=list)
    spam_notes: list[SpamNote] = Field(default_factory=list)
    hop_budget: int
    steps_taken: int = 0

    @property
    def hop_count(self) -> int:
        return len(self.evidence)


class ProgressEvent(BaseModel):
    """Incremental progress reported while a search runs."""

    message: str
    transient: bool = True
    step: int | None = None
    side: SearchSide | None = None
    address: str | None = None


class RelationshipRequest(BaseModel):
    """Request model for a relationship check."""

    address_a: str = Field(..., description="First wallet address")
    address_b: str = Field(..., description="Second wallet address")
    max_hops: int | None = Field(
        default=None,
        description=(
            "Hop budget; missing or invalid values use the default and values "
            "above the server maximum (MAX_HOP_BUDGET, 10 by default) are clamped to it"
        ),
    )

    @field_validator("max_hops", mode="before")
    @classmethod
    def coerce_max_hops(cls, v: Any) -> int | None:
        """Parse loosely; anything that is not an integer falls back to the default."""
        if v is None or isinstance(v, bool):
            return None
        try:
            return int(v)
        except (TypeError, ValueError):
            return None


class EvidenceItem(BaseModel):
    """Evidence step as rendered for API clients."""

    pair: str
    sender: str
    receiver: str
    tx_ref: str
    url: str


class SpamNoteItem(BaseModel):
    """Spam note as rendered for API clients."""

    address: str
    url_a: str | None = None
    url_b: str | None = None


class RelationshipConclusion(BaseModel):
    """Final event of a relationship check."""

    found: bool
    status: str
    chain: Chain
    hop_count: int = 0
    hop_budget: int = Field(..., description="Hop budget actually used, after defaulting and clamping")
    meeting_point: str | None = None
    evidence: list[EvidenceItem] = Field(default_factory=list)
    spam_notes: list[SpamNoteItem] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    cache_status: str
