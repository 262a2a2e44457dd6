"""Tests for Pydantic models, chain helpers and rendering."""

import pytest

from walletlink.constants import Chain, TransferRole, canonical_address
from walletlink.models.relationship import (
    EvidenceStep,
    RelationshipRequest,
    SearchResult,
    SpamNote,
    TransferEdge,
    VisitedRecord,
)
from walletlink.services.chain_classifier import (
    identify_chain,
    is_ethereum_address,
    is_solana_address,
)
from walletlink.services.conclusion import build_conclusion
from walletlink.utils import shorten_address

SOL_ADDRESS = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
ETH_ADDRESS = "0x742d35Cc6634C0532925a3b844Bc454e4438f44e"


class TestChainClassifier:
    """Tests for identify_chain."""

    @pytest.mark.parametrize(
        "address",
        [
            SOL_ADDRESS,
            "So11111111111111111111111111111111111111112",
            "11111111111111111111111111111111",
        ],
    )
    def test_solana_addresses(self, address: str) -> None:
        """Base58 strings decoding to 32 bytes are Solana."""
        assert is_solana_address(address) is True
        assert identify_chain(address) is Chain.SOLANA

    def test_ethereum_address(self) -> None:
        """Test a hex address is Ethereum."""
        assert identify_chain(ETH_ADDRESS) is Chain.ETHEREUM

    @pytest.mark.parametrize("address", ["", "hello", "0OIl" * 10, "1" * 60])
    def test_malformed_falls_back_to_ethereum(self, address: str) -> None:
        """Ambiguous or malformed input falls back to the second chain."""
        assert identify_chain(address) is Chain.ETHEREUM

    def test_surrounding_whitespace_ignored(self) -> None:
        assert identify_chain(f"  {SOL_ADDRESS}\n") is Chain.SOLANA

    @pytest.mark.parametrize(
        "address, expected",
        [
            (ETH_ADDRESS, True),
            (ETH_ADDRESS.lower(), True),
            ("0x%%%", False),
            ("0x" + "g" * 40, False),
            (ETH_ADDRESS[:-1], False),
            (ETH_ADDRESS[2:] + "00", False),
        ],
    )
    def test_ethereum_format(self, address: str, expected: bool) -> None:
        """Ethereum addresses are 0x followed by 40 hex digits."""
        assert is_ethereum_address(address) is expected


class TestCanonicalAddress:
    """Tests for canonical_address."""

    def test_ethereum_lowercased(self) -> None:
        assert canonical_address(Chain.ETHEREUM, ETH_ADDRESS) == ETH_ADDRESS.lower()

    def test_solana_case_kept(self) -> None:
        assert canonical_address(Chain.SOLANA, f" {SOL_ADDRESS} ") == SOL_ADDRESS


class TestShortenAddress:
    """Tests for address display formatting."""

    def test_long_address(self) -> None:
        """First 4, middle 3, last 4."""
        assert shorten_address(ETH_ADDRESS) == "0x74...25a...f44e"

    def test_short_address_unchanged(self) -> None:
        assert shorten_address("A") == "A"
        assert shorten_address("12345678901234") == "12345678901234"

    def test_none(self) -> None:
        assert shorten_address(None) is None


class TestRelationshipRequest:
    """Tests for RelationshipRequest."""

    def test_valid_request(self) -> None:
        request = RelationshipRequest(address_a="A", address_b="B", max_hops=4)

        assert request.max_hops == 4

    def test_default_max_hops(self) -> None:
        assert RelationshipRequest(address_a="A", address_b="B").max_hops is None

    @pytest.mark.parametrize("value, expected", [("3", 3), ("abc", None), ("", None), (True, None), (0, 0)])
    def test_max_hops_parsed_loosely(self, value, expected) -> None:
        """Unparsable hop budgets become None rather than a validation error."""
        request = RelationshipRequest(address_a="A", address_b="B", max_hops=value)

        assert request.max_hops == expected


class TestModels:
    """Tests for the core records."""

    def test_visited_record_seed(self) -> None:
        assert VisitedRecord().is_seed is True
        assert VisitedRecord(parent="A", tx_ref="t", role=TransferRole.SENT_TO).is_seed is False

    def test_transfer_edge_frozen(self) -> None:
        edge = TransferEdge(counterparty="X", tx_ref="t", role=TransferRole.SENT_TO)

        with pytest.raises(Exception):
            edge.counterparty = "Y"

    def test_evidence_render(self) -> None:
        assert EvidenceStep(sender="A", receiver="X", tx_ref="t").render() == "A → X"


class TestConclusion:
    """Tests for build_conclusion."""

    def test_found(self) -> None:
        """Test a found result is rendered with status, links and hop count."""
        result = SearchResult(
            found=True,
            chain=Chain.ETHEREUM,
            meeting_point="0xmid",
            evidence=[
                EvidenceStep(sender=ETH_ADDRESS.lower(), receiver="0xmid", tx_ref="0x1"),
                EvidenceStep(sender="0xmid", receiver="0xb", tx_ref="0x2"),
            ],
            hop_budget=2,
            steps_taken=2,
        )

        conclusion = build_conclusion(result)

        assert conclusion.found is True
        assert conclusion.status == "Significant Connection Found (2 Hops)"
        assert conclusion.hop_count == 2
        assert conclusion.evidence[0].pair == "0x74...25a...f44e → 0xmid"
        assert conclusion.evidence[0].url == "https://etherscan.io/tx/0x1"
        assert conclusion.evidence[1].pair == "0xmid → 0xb"

    def test_not_found_keeps_spam_notes(self) -> None:
        """Test a not-found result still reports spam notes."""
        result = SearchResult(
            found=False,
            chain=Chain.SOLANA,
            spam_notes=[SpamNote(address=SOL_ADDRESS, tx_ref_a="sa", tx_ref_b="sb")],
            hop_budget=2,
            steps_taken=2,
        )

        conclusion = build_conclusion(result)

        assert conclusion.found is False
        assert conclusion.status == "No significant relationship found."
        assert conclusion.hop_count == 0
        assert conclusion.evidence == []
        assert conclusion.spam_notes[0].address == shorten_address(SOL_ADDRESS)
        assert conclusion.spam_notes[0].url_a == "https://solscan.io/tx/sa"
        assert conclusion.spam_notes[0].url_b == "https://solscan.io/tx/sb"
