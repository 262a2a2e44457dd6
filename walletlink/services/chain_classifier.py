"""Classify an address string as Solana or Ethereum."""

import logging
import re

import base58

from walletlink.constants import FALLBACK_CHAIN, Chain

logger = logging.getLogger(__name__)

SOLANA_PUBKEY_LENGTH = 32
ETHEREUM_ADDRESS_PATTERN = re.compile(r"0x[0-9a-fA-F]{40}")


def is_solana_address(address: str) -> bool:
    """True if ``address`` is base58 that decodes to a 32-byte public key."""
    if not 32 <= len(address) <= 44:
        return False
    try:
        decoded = base58.b58decode(address)
    except ValueError:
        return False
    return len(decoded) == SOLANA_PUBKEY_LENGTH


def is_ethereum_address(address: str) -> bool:
    """True if ``address`` is ``0x`` followed by 40 hex digits, in any case."""
    return ETHEREUM_ADDRESS_PATTERN.fullmatch(address) is not None


def identify_chain(address: str) -> Chain:
    """
    Pick the chain an address belongs to.

    Anything that is not a valid Solana public key, including malformed
    input, is treated as Ethereum. Callers that need a well-formed address
    check it with ``is_ethereum_address`` afterwards.
    """
    address = address.strip()
    if is_solana_address(address):
        return Chain.SOLANA
    logger.debug(f"Address {address!r} classified as {FALLBACK_CHAIN.value}")
    return FALLBACK_CHAIN
