"""Extraction schemas for loan agreements."""

from .extraction_fields import (
    FieldType,
    ExtractionField,
    ExtractionSchema,
    LOAN_AGREEMENT_SCHEMA,
    CovenantRule,
    COVENANT_RULES,
    DEFAULT_COVENANT_RULE,
)

__all__ = [
    "FieldType",
    "ExtractionField",
    "ExtractionSchema",
    "LOAN_AGREEMENT_SCHEMA",
    "CovenantRule",
    "COVENANT_RULES",
    "DEFAULT_COVENANT_RULE",
]
