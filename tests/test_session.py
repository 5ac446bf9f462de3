"""Tests for session state."""

from datetime import datetime, timezone

import pytest

from loanchain.common.exceptions import DocumentRejected
from loanchain.common.models import AgreementMetadata, ExtractionResult
from loanchain.extraction.normalizer import normalize_remote
from loanchain.extraction.router import extract_local
from loanchain.session import SessionState, build_agreement, default_flowchart
from loanchain.trading import simulate_trade


class TestBuildAgreement:
    """Tests for build_agreement."""

    def test_defaults_for_missing_metadata(self):
        agreement = build_agreement(ExtractionResult(is_valid=True))

        assert agreement.borrower == "Unknown"
        assert agreement.name == "Unknown - Credit Agreement"
        assert agreement.facility_amount == 0
        assert agreement.interest_type == "TBD"
        assert agreement.maturity_date == datetime.now(timezone.utc).date().isoformat()
        assert agreement.parsed is True

    def test_partial_metadata(self):
        result = ExtractionResult(
            is_valid=True,
            metadata=AgreementMetadata(borrower="Acme", facility_amount=5_000_000),
        )
        agreement = build_agreement(result)

        assert agreement.borrower == "Acme"
        assert agreement.name == "Acme - Credit Agreement"
        assert agreement.facility_amount == 5_000_000
        assert agreement.id.startswith("agreement-")

    def test_agreement_is_immutable(self):
        agreement = build_agreement(ExtractionResult(is_valid=True))

        with pytest.raises(AttributeError):
            agreement.borrower = "Someone Else"


class TestDefaultFlowchart:
    """Tests for the default funds-flow graph."""

    def test_structure(self):
        agreement = build_agreement(
            ExtractionResult(is_valid=True, metadata=AgreementMetadata(borrower="Acme"))
        )
        flowchart = default_flowchart(agreement)

        assert flowchart.nodes[0].label == "Acme (Borrower)"
        assert [n.id for n in flowchart.nodes] == ["1", "2", "3", "4", "5"]
        assert [(e.source, e.target) for e in flowchart.edges] == [
            ("1", "2"),
            ("2", "3"),
            ("3", "4"),
            ("1", "5"),
        ]


class TestSessionState:
    """Tests for applying extraction results."""

    def test_apply_local_result(self):
        session = SessionState()
        token = session.begin_attempt()

        assert session.apply_result(token, extract_local("Total of $50 million")) is True
        assert session.agreement.facility_amount == 50_000_000
        assert [c.id for c in session.covenants] == ["c1"]
        assert len(session.participants) == 4
        assert len(session.flowchart.nodes) == 5

    def test_remote_flowchart_kept(self):
        session = SessionState()
        token = session.begin_attempt()
        result = normalize_remote(
            {
                "isValid": True,
                "flowchart": {"nodes": [{"id": "1", "label": "Borrower"}], "edges": []},
            }
        )

        session.apply_result(token, result)

        assert [n.label for n in session.flowchart.nodes] == ["Borrower"]

    def test_stale_attempt_discarded(self):
        """Test that an older attempt cannot overwrite a newer one."""
        session = SessionState()
        first = session.begin_attempt()
        second = session.begin_attempt()

        assert session.apply_result(second, extract_local("$10 million")) is True
        assert session.apply_result(first, extract_local("$99 million")) is False
        assert session.agreement.facility_amount == 10_000_000

    def test_late_result_after_completion_discarded(self):
        session = SessionState()
        token = session.begin_attempt()
        session.apply_result(token, extract_local("$10 million"))

        assert session.apply_result(token, extract_local("$20 million")) is False
        assert session.agreement.facility_amount == 10_000_000

    def test_cancelled_attempt_discarded(self):
        session = SessionState()
        token = session.begin_attempt()
        session.cancel_attempt(token)

        assert session.is_current(token) is False
        assert session.apply_result(token, extract_local("$10 million")) is False
        assert session.agreement is None

    def test_cancel_of_old_token_keeps_active(self):
        session = SessionState()
        old = session.begin_attempt()
        current = session.begin_attempt()
        session.cancel_attempt(old)

        assert session.is_current(current) is True

    def test_rejection_raises_and_keeps_deal(self):
        session = SessionState()
        session.apply_result(session.begin_attempt(), extract_local("$10 million"))
        previous = session.agreement

        with pytest.raises(DocumentRejected, match="Not a loan agreement"):
            session.apply_result(
                session.begin_attempt(),
                ExtractionResult(is_valid=False, reason="Not a loan agreement"),
            )

        assert session.agreement is previous

    def test_new_result_clears_trades(self):
        session = SessionState()
        session.apply_result(session.begin_attempt(), extract_local("$10 million"))
        session.add_trade(simulate_trade(session.participants))
        session.add_deal_sheet({"id": "deal-1"})

        assert session.last_trade is not None

        session.apply_result(session.begin_attempt(), extract_local("$20 million"))

        assert session.trades == []
        assert session.deal_sheets == []
        assert session.last_trade is None
