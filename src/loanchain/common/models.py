"""Data models for LoanChain extraction."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class ExtractionMode(str, Enum):
    """Which engine extracts deal terms from the document text."""
    LOCAL = "local"
    REMOTE = "remote"


class CovenantStatus(str, Enum):
    """Compliance status assigned to a covenant."""
    HEALTHY = "healthy"
    WARNING = "warning"
    BREACH = "breach"


class ParticipantRole(str, Enum):
    """Role of a party in the syndicate."""
    BORROWER = "borrower"
    LENDER = "lender"
    AGENT = "agent"
    BUYER = "buyer"


def utc_timestamp() -> str:
    """Current UTC time as an ISO 8601 string with a Z suffix."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def epoch_millis() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


@dataclass
class Covenant:
    """A financial covenant test attached to an agreement."""

    id: str
    name: str
    threshold: float
    current_value: float
    status: CovenantStatus = CovenantStatus.HEALTHY
    type: str = "Financial"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "threshold": self.threshold,
            "currentValue": self.current_value,
            "status": self.status.value,
        }


@dataclass
class Participant:
    """A party holding (or buying) exposure to the facility."""

    id: str
    name: str
    role: ParticipantRole
    exposure: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role.value,
            "exposure": self.exposure,
        }


@dataclass
class AgreementMetadata:
    """Agreement-shaped partial produced by an extraction path.

    Remote results may omit any field; local results fill every field.
    """

    borrower: Optional[str] = None
    facility_amount: Optional[int] = None
    interest_type: Optional[str] = None
    maturity_date: Optional[str] = None  # ISO format
    id: Optional[str] = None
    name: Optional[str] = None
    upload_date: Optional[str] = None
    parsed: Optional[bool] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, leaving out fields that were never set."""
        data = {
            "id": self.id,
            "name": self.name,
            "borrower": self.borrower,
            "facilityAmount": self.facility_amount,
            "interestType": self.interest_type,
            "maturityDate": self.maturity_date,
            "uploadDate": self.upload_date,
            "parsed": self.parsed,
        }
        return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class Agreement:
    """A fully populated loan agreement owned by the session state.

    Frozen: a new extraction replaces the agreement wholesale.
    """

    id: str
    name: str
    borrower: str
    facility_amount: int
    interest_type: str
    maturity_date: str
    upload_date: str
    parsed: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "borrower": self.borrower,
            "facilityAmount": self.facility_amount,
            "interestType": self.interest_type,
            "maturityDate": self.maturity_date,
            "uploadDate": self.upload_date,
            "parsed": self.parsed,
        }


@dataclass
class FlowNode:
    id: str
    label: str
    type: Optional[str] = None
    color: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "label": self.label}
        if self.type is not None:
            data["type"] = self.type
        if self.color is not None:
            data["color"] = self.color
        return data


@dataclass
class FlowEdge:
    id: str
    source: str
    target: str
    label: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "source": self.source, "target": self.target}
        if self.label is not None:
            data["label"] = self.label
        return data


@dataclass
class Flowchart:
    """Funds-flow graph of labeled nodes and edges."""

    nodes: list[FlowNode] = field(default_factory=list)
    edges: list[FlowEdge] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }


@dataclass
class ExtractionResult:
    """Canonical result produced by both the local and the remote extraction path."""

    is_valid: bool
    reason: Optional[str] = None
    metadata: Optional[AgreementMetadata] = None
    covenants: list[Covenant] = field(default_factory=list)
    participants: list[Participant] = field(default_factory=list)
    flowchart: Optional[Flowchart] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: dict[str, Any] = {"isValid": self.is_valid}
        if self.reason is not None:
            data["reason"] = self.reason
        if self.metadata is not None:
            data["metadata"] = self.metadata.to_dict()
        data["covenants"] = [c.to_dict() for c in self.covenants]
        data["participants"] = [p.to_dict() for p in self.participants]
        if self.flowchart is not None:
            data["flowchart"] = self.flowchart.to_dict()
        return data


@dataclass
class Trade:
    """A simulated transfer of part of a lender's position to a buyer."""

    id: str
    seller: Participant
    buyer: Participant
    percentage: float
    price: float
    timestamp: str = field(default_factory=utc_timestamp)

    @property
    def par_amount(self) -> float:
        return self.seller.exposure * self.percentage / 100

    @property
    def settlement_amount(self) -> float:
        return self.par_amount * self.price / 100

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "seller": self.seller.to_dict(),
            "buyer": self.buyer.to_dict(),
            "percentage": self.percentage,
            "price": self.price,
            "parAmount": self.par_amount,
            "settlementAmount": self.settlement_amount,
            "timestamp": self.timestamp,
        }
