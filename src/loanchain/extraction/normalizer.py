"""Extraction Result Normalizer.

Turns the output of either extraction path into one ExtractionResult:

- Local results are always valid; every field is already defaulted.
- Remote results must carry a boolean ``isValid``. Invalid results keep only
  the rejection reason. Valid results have their loosely typed fields coerced
  into the model's types; a field that cannot be read is dropped rather than
  failing the whole result.

Both paths attach the synthesized participants for the normalized amount.
"""

import json
import math
from typing import Any, Optional

from ..common.exceptions import RemoteExtractionFailed
from ..common.models import (
    AgreementMetadata,
    Covenant,
    CovenantStatus,
    ExtractionResult,
    Flowchart,
    FlowEdge,
    FlowNode,
    epoch_millis,
    utc_timestamp,
)
from ..common.safe_log import safe_log
from ..utils.validation import parse_currency, parse_date
from .participants import synthesize_participants
from .patterns import PatternFields

DEFAULT_REJECTION_REASON = "The uploaded document does not appear to be a valid loan agreement."


def agreement_name(borrower: Optional[str], document_name: Optional[str] = None) -> str:
    """File name of the upload, else '<borrower> - Credit Agreement'."""
    if document_name:
        return document_name
    return f"{borrower or 'Unknown'} - Credit Agreement"


def normalize_local(
    fields: PatternFields,
    covenants: list[Covenant],
    document_name: Optional[str] = None,
) -> ExtractionResult:
    """Assemble the local engine's output. Never rejects."""
    metadata = AgreementMetadata(
        id=f"agreement-{epoch_millis()}",
        name=agreement_name(fields.borrower, document_name),
        borrower=fields.borrower,
        facility_amount=fields.facility_amount,
        interest_type=fields.interest_type,
        maturity_date=fields.maturity_date,
        upload_date=utc_timestamp(),
        parsed=True,
    )
    return ExtractionResult(
        is_valid=True,
        metadata=metadata,
        covenants=list(covenants),
        participants=synthesize_participants(fields.facility_amount),
        flowchart=None,
    )


def _malformed(message: str, payload: Any) -> RemoteExtractionFailed:
    try:
        body = json.dumps(payload, default=str)[:2000]
    except (TypeError, ValueError):
        body = str(payload)[:2000]
    return RemoteExtractionFailed(f"Malformed remote extraction result: {message}", body=body)


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _normalize_metadata(raw: Any) -> Optional[AgreementMetadata]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise _malformed("'metadata' is not an object", raw)

    facility_amount = None
    if raw.get("facilityAmount") is not None:
        try:
            facility_amount = parse_currency(raw["facilityAmount"])
        except ValueError:
            safe_log("Warning: unreadable facilityAmount from remote extractor", value=raw["facilityAmount"])
        if facility_amount is not None and facility_amount < 0:
            safe_log("Warning: negative facilityAmount from remote extractor", value=facility_amount)
            facility_amount = None

    maturity = _optional_str(raw.get("maturityDate"))

    return AgreementMetadata(
        borrower=_optional_str(raw.get("borrower")),
        facility_amount=facility_amount,
        interest_type=_optional_str(raw.get("interestType")),
        maturity_date=parse_date(maturity) if maturity else None,
    )


def _normalize_covenants(raw: Any) -> list[Covenant]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise _malformed("'covenants' is not a list", raw)

    covenants = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict) or not _optional_str(item.get("name")):
            safe_log("Warning: skipping unnamed covenant from remote extractor", index=index)
            continue
        try:
            threshold = float(item.get("threshold"))
            current_value = float(item.get("currentValue"))
        except (TypeError, ValueError):
            safe_log("Warning: skipping covenant with non-numeric values", index=index, name=item.get("name"))
            continue
        if not (math.isfinite(threshold) and math.isfinite(current_value)):
            safe_log("Warning: skipping covenant with non-finite values", index=index, name=item.get("name"))
            continue

        status_raw = str(item.get("status", "healthy")).strip().lower()
        try:
            status = CovenantStatus(status_raw)
        except ValueError:
            safe_log("Warning: unknown covenant status, using healthy", status=status_raw)
            status = CovenantStatus.HEALTHY

        covenants.append(
            Covenant(
                id=_optional_str(item.get("id")) or f"cov-{index + 1}",
                name=_optional_str(item["name"]),
                type=_optional_str(item.get("type")) or "Financial",
                threshold=threshold,
                current_value=current_value,
                status=status,
            )
        )
    return covenants


def _list_or_empty(raw: Any, label: str) -> list:
    if raw is None:
        return []
    if not isinstance(raw, list):
        safe_log(f"Warning: ignoring {label} that are not a list")
        return []
    return raw


def _normalize_flowchart(raw: Any) -> Optional[Flowchart]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        safe_log("Warning: ignoring flowchart that is not an object")
        return None

    nodes = []
    for item in _list_or_empty(raw.get("nodes"), "flowchart nodes"):
        if not isinstance(item, dict) or item.get("id") is None:
            continue
        nodes.append(
            FlowNode(
                id=str(item["id"]),
                label=str(item.get("label", "")),
                type=_optional_str(item.get("type")),
                color=_optional_str(item.get("color")),
            )
        )

    node_ids = {n.id for n in nodes}
    edges = []
    for item in _list_or_empty(raw.get("edges"), "flowchart edges"):
        if not isinstance(item, dict):
            continue
        source, target = str(item.get("source")), str(item.get("target"))
        if source not in node_ids or target not in node_ids:
            continue
        edges.append(
            FlowEdge(
                id=_optional_str(item.get("id")) or f"e{source}-{target}",
                source=source,
                target=target,
                label=_optional_str(item.get("label")),
            )
        )

    if not nodes:
        return None
    return Flowchart(nodes=nodes, edges=edges)


def normalize_remote(payload: Any) -> ExtractionResult:
    """Validate and coerce the remote extractor's JSON answer.

    Raises:
        RemoteExtractionFailed: if the payload lacks the required structure
    """
    if not isinstance(payload, dict):
        raise _malformed("result is not an object", payload)

    is_valid = payload.get("isValid")
    if not isinstance(is_valid, bool):
        raise _malformed("'isValid' is missing or not a boolean", payload)

    if not is_valid:
        reason = _optional_str(payload.get("reason")) or DEFAULT_REJECTION_REASON
        safe_log("Remote extractor rejected document", reason=reason)
        return ExtractionResult(is_valid=False, reason=reason)

    metadata = _normalize_metadata(payload.get("metadata"))
    covenants = _normalize_covenants(payload.get("covenants"))
    flowchart = _normalize_flowchart(payload.get("flowchart"))
    facility_amount = metadata.facility_amount if metadata and metadata.facility_amount else 0

    result = ExtractionResult(
        is_valid=True,
        metadata=metadata,
        covenants=covenants,
        participants=synthesize_participants(facility_amount),
        flowchart=flowchart,
    )
    safe_log(
        "Normalized remote extraction",
        covenants=len(covenants),
        has_metadata=metadata is not None,
        has_flowchart=flowchart is not None,
    )
    return result
