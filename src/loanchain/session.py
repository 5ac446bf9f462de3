"""Session state - the consumer of extraction results.

Owns the current agreement and everything derived from it. Each upload
attempt takes a token from ``begin_attempt()``; only the latest token may
apply its result, so a slow, abandoned attempt cannot overwrite a newer one.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from itertools import count
from typing import Any, Optional

from .common.exceptions import DocumentRejected
from .common.models import (
    Agreement,
    Covenant,
    ExtractionResult,
    Flowchart,
    FlowEdge,
    FlowNode,
    Participant,
    Trade,
    epoch_millis,
    utc_timestamp,
)
from .common.safe_log import safe_log
from .extraction.normalizer import agreement_name
from .extraction.participants import synthesize_participants

# Node colors used by the funds-flow graph
BORROWER_COLOR = "#6366f1"
PAYMENT_COLOR = "#22c55e"
AGENT_COLOR = "#3b82f6"
LENDER_COLOR = "#3b82f6"
COVENANT_COLOR = "#ef4444"


def default_flowchart(agreement: Agreement) -> Flowchart:
    """Borrower -> Interest Payment -> Agent -> Lenders -> Covenant Check."""
    nodes = [
        FlowNode(id="1", label=f"{agreement.borrower} (Borrower)", type="input", color=BORROWER_COLOR),
        FlowNode(id="2", label="Interest Payment", color=PAYMENT_COLOR),
        FlowNode(id="3", label="Administrative Agent", color=AGENT_COLOR),
        FlowNode(id="4", label="Syndicate Lenders", color=LENDER_COLOR),
        FlowNode(id="5", label="Covenant Check", color=COVENANT_COLOR),
    ]
    edges = [
        FlowEdge(id="e1-2", source="1", target="2"),
        FlowEdge(id="e2-3", source="2", target="3"),
        FlowEdge(id="e3-4", source="3", target="4"),
        FlowEdge(id="e1-5", source="1", target="5"),
    ]
    return Flowchart(nodes=nodes, edges=edges)


def build_agreement(result: ExtractionResult) -> Agreement:
    """Fill an Agreement from result metadata, defaulting missing fields."""
    metadata = result.metadata
    borrower = (metadata.borrower if metadata else None) or "Unknown"
    return Agreement(
        id=(metadata.id if metadata else None) or f"agreement-{epoch_millis()}",
        name=(metadata.name if metadata else None) or agreement_name(borrower),
        borrower=borrower,
        facility_amount=(metadata.facility_amount if metadata else None) or 0,
        interest_type=(metadata.interest_type if metadata else None) or "TBD",
        maturity_date=(metadata.maturity_date if metadata else None)
        or datetime.now(timezone.utc).date().isoformat(),
        upload_date=(metadata.upload_date if metadata else None) or utc_timestamp(),
        parsed=True,
    )


@dataclass
class SessionState:
    """Current deal under analysis plus the trades and deal sheets built on it."""

    agreement: Optional[Agreement] = None
    covenants: list[Covenant] = field(default_factory=list)
    participants: list[Participant] = field(default_factory=list)
    flowchart: Optional[Flowchart] = None
    trades: list[Trade] = field(default_factory=list)
    deal_sheets: list[dict[str, Any]] = field(default_factory=list)
    _attempts: Any = field(default_factory=lambda: count(1), repr=False)
    _active_attempt: Optional[int] = field(default=None, repr=False)

    def begin_attempt(self) -> int:
        """Start an upload attempt; any earlier attempt becomes stale."""
        self._active_attempt = next(self._attempts)
        return self._active_attempt

    def cancel_attempt(self, token: Optional[int] = None) -> None:
        """Abandon the active attempt (or ``token`` if it is the active one)."""
        if token is None or token == self._active_attempt:
            self._active_attempt = None

    def is_current(self, token: int) -> bool:
        return token == self._active_attempt

    def apply_result(self, token: int, result: ExtractionResult) -> bool:
        """Replace the session's deal with an extraction result.

        Returns:
            False if the attempt is stale or cancelled and the result was discarded

        Raises:
            DocumentRejected: if the result is not a valid loan agreement
        """
        if not self.is_current(token):
            safe_log("Discarding stale extraction result", attempt=token, active=self._active_attempt)
            return False
        self._active_attempt = None

        if not result.is_valid:
            raise DocumentRejected(result.reason or "Document rejected")

        agreement = build_agreement(result)
        self.agreement = agreement
        self.covenants = list(result.covenants)
        self.participants = list(result.participants) or synthesize_participants(agreement.facility_amount)
        self.flowchart = result.flowchart or default_flowchart(agreement)
        self.trades = []
        self.deal_sheets = []

        safe_log(
            "Applied extraction result",
            agreement=agreement.id,
            borrower=agreement.borrower,
            covenants=len(self.covenants),
        )
        return True

    def add_trade(self, trade: Trade) -> None:
        self.trades.append(trade)

    def add_deal_sheet(self, deal_sheet: dict[str, Any]) -> None:
        self.deal_sheets.append(deal_sheet)

    @property
    def last_trade(self) -> Optional[Trade]:
        return self.trades[-1] if self.trades else None
