"""Common utilities for LoanChain extraction."""

from .aws_clients import get_bedrock_client
from .config import Settings, get_settings
from .models import (
    Agreement,
    AgreementMetadata,
    Covenant,
    CovenantStatus,
    ExtractionMode,
    ExtractionResult,
    Flowchart,
    FlowEdge,
    FlowNode,
    Participant,
    ParticipantRole,
    Trade,
)
from .exceptions import (
    ConfigurationError,
    DocumentProcessingError,
    DocumentRejected,
    DocumentUnreadable,
    RemoteExtractionFailed,
)
from .safe_log import safe_log

__all__ = [
    "get_bedrock_client",
    "Settings",
    "get_settings",
    "Agreement",
    "AgreementMetadata",
    "Covenant",
    "CovenantStatus",
    "ExtractionMode",
    "ExtractionResult",
    "Flowchart",
    "FlowEdge",
    "FlowNode",
    "Participant",
    "ParticipantRole",
    "Trade",
    "ConfigurationError",
    "DocumentProcessingError",
    "DocumentRejected",
    "DocumentUnreadable",
    "RemoteExtractionFailed",
    "safe_log",
]
