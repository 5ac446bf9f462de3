"""Participant Synthesizer - placeholder capital structure for a facility."""

from ..common.models import Participant, ParticipantRole

AGENT_SHARE_PCT = 20
LENDER_SHARE_PCT = 40


def synthesize_participants(facility_amount: int) -> list[Participant]:
    """Split the facility 20/40/40 across arranger and two syndicate lenders.

    The second lender takes the integer-division remainder, so agent plus
    lender exposures always add up to exactly ``facility_amount``. The buyer
    starts with no exposure.
    """
    amount = max(int(facility_amount), 0)
    agent = amount * AGENT_SHARE_PCT // 100
    lender_a = amount * LENDER_SHARE_PCT // 100
    lender_b = amount - agent - lender_a

    return [
        Participant(id="p1", name="Lead Arranger", role=ParticipantRole.AGENT, exposure=agent),
        Participant(id="p2", name="Syndicate Member A", role=ParticipantRole.LENDER, exposure=lender_a),
        Participant(id="p3", name="Syndicate Member B", role=ParticipantRole.LENDER, exposure=lender_b),
        Participant(id="p4", name="Institutional Investor X", role=ParticipantRole.BUYER, exposure=0),
    ]
