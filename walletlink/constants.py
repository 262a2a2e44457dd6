"""Application constants and chain configurations."""

from enum import Enum
from typing import NamedTuple


class Chain(str, Enum):
    """Blockchains the relationship search can walk."""

    SOLANA = "solana"
    ETHEREUM = "ethereum"


class TransferRole(str, Enum):
    """What the origin address did with a counterparty."""

    SENT_TO = "sent_to"
    RECEIVED_FROM = "received_from"


class ChainConfig(NamedTuple):
    """Configuration for a blockchain network."""

    slug: str
    name: str
    symbol: str
    tx_explorer_base: str
    case_sensitive: bool


SUPPORTED_CHAINS: dict[Chain, ChainConfig] = {
    # Base58 public keys, case is significant
    Chain.SOLANA: ChainConfig(
        "solana", "Solana", "SOL", "https://solscan.io/tx/", True
    ),
    # Hex addresses, compared lowercase
    Chain.ETHEREUM: ChainConfig(
        "ethereum", "Ethereum", "ETH", "https://etherscan.io/tx/", False
    ),
}

# Chain used when an address cannot be classified
FALLBACK_CHAIN = Chain.ETHEREUM

CACHE_KEY_PREFIX = "walletlink"


def canonical_address(chain: Chain, address: str) -> str:
    """Return the form of ``address`` used for equality on ``chain``."""
    address = address.strip()
    if SUPPORTED_CHAINS[chain].case_sensitive:
        return address
    return address.lower()
