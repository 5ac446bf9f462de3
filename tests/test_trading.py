"""Tests for trade simulation."""

import pytest

from loanchain.common.models import Participant, ParticipantRole
from loanchain.extraction.participants import synthesize_participants
from loanchain.trading import simulate_trade


class TestSimulateTrade:
    """Tests for simulate_trade."""

    def test_defaults(self):
        trade = simulate_trade(synthesize_participants(100_000_000))

        assert trade.seller.name == "Syndicate Member A"
        assert trade.buyer.name == "Institutional Investor X"
        assert trade.percentage == 50
        assert trade.price == 98.5
        assert trade.par_amount == 20_000_000
        assert trade.settlement_amount == pytest.approx(19_700_000)
        assert trade.id.startswith("trade-")

    def test_to_dict(self):
        trade = simulate_trade(synthesize_participants(10_000_000), percentage=25, price=100)
        data = trade.to_dict()

        assert data["seller"]["id"] == "p2"
        assert data["buyer"]["role"] == "buyer"
        assert data["parAmount"] == 1_000_000
        assert data["settlementAmount"] == 1_000_000
        assert data["timestamp"].endswith("Z")

    @pytest.mark.parametrize("percentage", [0, -10, 100.5])
    def test_percentage_out_of_range(self, percentage):
        with pytest.raises(ValueError, match="percentage"):
            simulate_trade(synthesize_participants(1_000), percentage=percentage)

    def test_price_must_be_positive(self):
        with pytest.raises(ValueError, match="price"):
            simulate_trade(synthesize_participants(1_000), price=0)

    def test_requires_lender(self):
        participants = [Participant(id="p4", name="Buyer", role=ParticipantRole.BUYER)]

        with pytest.raises(ValueError, match="No lender"):
            simulate_trade(participants)

    def test_requires_buyer(self):
        participants = [Participant(id="p2", name="Lender", role=ParticipantRole.LENDER, exposure=10)]

        with pytest.raises(ValueError, match="No buyer"):
            simulate_trade(participants)
