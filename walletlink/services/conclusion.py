"""Render a SearchResult as the conclusion sent to clients."""

from walletlink.models.relationship import (
    EvidenceItem,
    RelationshipConclusion,
    SearchResult,
    SpamNoteItem,
)
from walletlink.services.path_builder import explorer_url
from walletlink.utils import shorten_address

NOT_FOUND_STATUS = "No significant relationship found."


def build_conclusion(result: SearchResult) -> RelationshipConclusion:
    """Shorten addresses and attach explorer links for display."""
    spam_notes = [
        SpamNoteItem(
            address=shorten_address(note.address),
            url_a=explorer_url(result.chain, note.tx_ref_a),
            url_b=explorer_url(result.chain, note.tx_ref_b),
        )
        for note in result.spam_notes
    ]

    if not result.found:
        return RelationshipConclusion(
            found=False,
            status=NOT_FOUND_STATUS,
            chain=result.chain,
            hop_budget=result.hop_budget,
            spam_notes=spam_notes,
        )

    evidence = [
        EvidenceItem(
            pair=f"{shorten_address(step.sender)} → {shorten_address(step.receiver)}",
            sender=step.sender,
            receiver=step.receiver,
            tx_ref=step.tx_ref,
            url=explorer_url(result.chain, step.tx_ref) or "",
        )
        for step in result.evidence
    ]
    return RelationshipConclusion(
        found=True,
        status=f"Significant Connection Found ({result.hop_count} Hops)",
        chain=result.chain,
        hop_count=result.hop_count,
        hop_budget=result.hop_budget,
        meeting_point=result.meeting_point,
        evidence=evidence,
        spam_notes=spam_notes,
    )
