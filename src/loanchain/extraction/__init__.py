"""Loan agreement extraction engine."""

from .covenants import extract_covenants, locate_covenant_section
from .normalizer import normalize_local, normalize_remote
from .participants import synthesize_participants
from .patterns import (
    PatternFields,
    extract_borrower,
    extract_facility_amount,
    extract_fields,
    extract_interest_type,
    extract_maturity_date,
)
from .remote import BedrockExtractor, GroqExtractor, create_remote_extractor
from .router import ExtractionRouter, extract_local
from .text_extractor import extract_text, extract_text_async

__all__ = [
    "extract_covenants",
    "locate_covenant_section",
    "normalize_local",
    "normalize_remote",
    "synthesize_participants",
    "PatternFields",
    "extract_borrower",
    "extract_facility_amount",
    "extract_fields",
    "extract_interest_type",
    "extract_maturity_date",
    "BedrockExtractor",
    "GroqExtractor",
    "create_remote_extractor",
    "ExtractionRouter",
    "extract_local",
    "extract_text",
    "extract_text_async",
]
