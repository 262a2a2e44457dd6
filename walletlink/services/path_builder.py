"""Turn the two parent-pointer trees into a directed evidence chain."""

import logging

from walletlink.constants import SUPPORTED_CHAINS, Chain, TransferRole
from walletlink.core.exceptions import SearchInvariantError
from walletlink.models.relationship import EvidenceStep, VisitedRecord

logger = logging.getLogger(__name__)


def orient(node: str, record: VisitedRecord) -> EvidenceStep:
    """
    Render the edge between ``node`` and its parent as sender to receiver.

    ``sent_to`` means the parent sent to ``node``; ``received_from`` means
    ``node`` sent to the parent. The rule is the same on both sides.
    """
    if record.parent is None or record.role is None or record.tx_ref is None:
        raise SearchInvariantError(f"Seed record for {node} has no edge to orient")
    if record.role is TransferRole.SENT_TO:
        return EvidenceStep(sender=record.parent, receiver=node, tx_ref=record.tx_ref)
    return EvidenceStep(sender=node, receiver=record.parent, tx_ref=record.tx_ref)


def _walk_to_seed(
    visited: dict[str, VisitedRecord], start: str, side: str
) -> list[EvidenceStep]:
    """Steps from ``start`` back to the seed, in walk order."""
    steps: list[EvidenceStep] = []
    node = start
    # a tree has at most len(visited) - 1 edges
    for _ in range(len(visited)):
        record = visited.get(node)
        if record is None:
            raise SearchInvariantError(f"No side {side} record for {node}")
        if record.is_seed:
            return steps
        steps.append(orient(node, record))
        node = record.parent
    raise SearchInvariantError(f"Side {side} parent chain from {start} does not reach a seed")


def reconstruct_path(
    visited_a: dict[str, VisitedRecord],
    visited_b: dict[str, VisitedRecord],
    meeting_point: str,
) -> list[EvidenceStep]:
    """
    Build the evidence chain from seed A to seed B through ``meeting_point``.

    Args:
        visited_a: Side A's visited map.
        visited_b: Side B's visited map.
        meeting_point: Address present in both maps.

    Returns:
        Ordered steps; empty when the meeting point is a seed on both sides.

    Raises:
        SearchInvariantError: If a walk hits an address with no record or
            never reaches a seed.
    """
    towards_a = _walk_to_seed(visited_a, meeting_point, "A")
    towards_b = _walk_to_seed(visited_b, meeting_point, "B")
    return list(reversed(towards_a)) + towards_b


def explorer_url(chain: Chain, tx_ref: str | None) -> str | None:
    """Link to the transaction on the chain's block explorer."""
    if not tx_ref:
        return None
    return SUPPORTED_CHAINS[chain].tx_explorer_base + tx_ref
