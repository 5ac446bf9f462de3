"""Trade simulation against the synthesized capital structure."""

from typing import Iterable

from .common.models import Participant, ParticipantRole, Trade, epoch_millis
from .common.safe_log import safe_log

DEFAULT_TRADE_PERCENTAGE = 50
DEFAULT_TRADE_PRICE = 98.5  # percent of par


def simulate_trade(
    participants: Iterable[Participant],
    percentage: float = DEFAULT_TRADE_PERCENTAGE,
    price: float = DEFAULT_TRADE_PRICE,
) -> Trade:
    """Sell ``percentage`` of the first lender's position to the first buyer.

    Args:
        participants: Current participants of the deal
        percentage: Share of the seller's exposure transferred, in (0, 100]
        price: Price as a percentage of par, > 0

    Raises:
        ValueError: if there is no lender or buyer, or inputs are out of range
    """
    if not 0 < percentage <= 100:
        raise ValueError(f"Trade percentage must be in (0, 100], got {percentage}")
    if price <= 0:
        raise ValueError(f"Trade price must be positive, got {price}")

    participants = list(participants)
    lenders = [p for p in participants if p.role is ParticipantRole.LENDER]
    buyers = [p for p in participants if p.role is ParticipantRole.BUYER]
    if not lenders:
        raise ValueError("No lender available to sell")
    if not buyers:
        raise ValueError("No buyer available to purchase")

    trade = Trade(
        id=f"trade-{epoch_millis()}",
        seller=lenders[0],
        buyer=buyers[0],
        percentage=percentage,
        price=price,
    )
    safe_log(
        "Simulated trade",
        seller=trade.seller.name,
        buyer=trade.buyer.name,
        par=trade.par_amount,
        settlement=trade.settlement_amount,
    )
    return trade
