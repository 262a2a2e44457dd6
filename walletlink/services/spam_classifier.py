"""Classify collisions between the two search trees."""

from walletlink.constants import TransferRole
from walletlink.core.exceptions import SearchInvariantError
from walletlink.models.relationship import SpamNote, VisitedRecord


def is_spam_coincidence(record_a: VisitedRecord, record_b: VisitedRecord) -> bool:
    """
    True when both sides only ever received from the colliding address.

    A common sender into both seeds (airdrops, faucets) says nothing about
    funds moving between them. Any pattern with a send in it does.
    """
    return (
        record_a.role is TransferRole.RECEIVED_FROM
        and record_b.role is TransferRole.RECEIVED_FROM
    )


def classify_collision(
    address: str,
    visited_a: dict[str, VisitedRecord],
    visited_b: dict[str, VisitedRecord],
) -> SpamNote | None:
    """
    Decide what a collision at ``address`` means.

    Returns:
        A SpamNote if the collision is a spam coincidence, None if
        ``address`` is a genuine meeting point.

    Raises:
        SearchInvariantError: If either side has no record for ``address``.
    """
    record_a = visited_a.get(address)
    record_b = visited_b.get(address)
    if record_a is None or record_b is None:
        raise SearchInvariantError(f"Collision at {address} is missing a visited record")

    if is_spam_coincidence(record_a, record_b):
        return SpamNote(address=address, tx_ref_a=record_a.tx_ref, tx_ref_b=record_b.tx_ref)
    return None
