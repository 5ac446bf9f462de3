"""Extraction field and covenant rule definitions for loan agreements.

This module defines the fields the local pattern engine pulls out of an
agreement, the regular expression each field is matched with, and the value
used when the pattern does not fire. Covenant rules live here as well so the
whole local extraction battery is declared in one place.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..common.models import CovenantStatus


class FieldType(str, Enum):
    """Data types for extracted fields."""

    STRING = "string"
    CURRENCY = "currency"
    RATE = "rate"  # Spread over a benchmark, rendered in basis points
    DATE = "date"


@dataclass
class ExtractionField:
    """Definition of a single field to extract."""

    id: str  # Unique field identifier
    name: str  # Display name
    field_type: FieldType
    description: str
    regex_pattern: Optional[str] = None
    case_sensitive: bool = True
    capture_group: int = 0  # 0 = whole match
    default_value: Any = None  # None = computed at extraction time
    max_length: Optional[int] = None

    def compile(self) -> re.Pattern:
        """Compile the field's pattern. Never DOTALL: '.' stops at page breaks."""
        if not self.regex_pattern:
            raise ValueError(f"Field '{self.id}' has no regex pattern")
        flags = 0 if self.case_sensitive else re.IGNORECASE
        return re.compile(self.regex_pattern, flags)


@dataclass
class ExtractionSchema:
    """Complete extraction schema for a document type."""

    id: str
    name: str
    description: str
    fields: list[ExtractionField]


# ============================================================
# LOAN AGREEMENT EXTRACTION SCHEMA
# ============================================================

FACILITY_AMOUNT = ExtractionField(
    id="facility_amount",
    name="Facility Amount",
    field_type=FieldType.CURRENCY,
    description="Total committed amount, first dollar figure in the document",
    regex_pattern=r"\$\s*([\d,]+(\.\d+)?)\s*(million|billion)?",
    case_sensitive=False,
    capture_group=0,
    default_value=100_000_000,
)

BORROWER_NAME = ExtractionField(
    id="borrower",
    name="Borrower",
    field_type=FieldType.STRING,
    description="Borrower or credit party name following a 'Borrower:' style label",
    regex_pattern=r"(?:Borrower|Company|Credit Parties)\s*[:\-] \s*([A-Z][a-zA-Z0-9\s,\.]+)(?:,|\s+and)",
    case_sensitive=True,
    capture_group=1,
    default_value="Unknown Borrower",
    max_length=50,
)

INTEREST_TYPE = ExtractionField(
    id="interest_type",
    name="Interest Type",
    field_type=FieldType.RATE,
    description="Margin over the benchmark rate, e.g. 'SOFR plus 3.50%'",
    regex_pattern=r"(?:Interest Rate|Margin|Applicable Rate).*?(?:SOFR|LIBOR|Base Rate)\s*(?:plus|\+)\s*([\d\.]+)\s*%",
    case_sensitive=False,
    capture_group=1,
    default_value="SOFR + 350bps",
)

MATURITY_DATE = ExtractionField(
    id="maturity_date",
    name="Maturity Date",
    field_type=FieldType.DATE,
    description="First 'Month day, year' date after a maturity or termination label",
    regex_pattern=r"(?:Maturity Date|Termination Date).*?([A-Z][a-z]+ \d{1,2}, \d{4})",
    case_sensitive=True,
    capture_group=1,
    default_value=None,  # today + 5 years
)

LOAN_AGREEMENT_SCHEMA = ExtractionSchema(
    id="loan_agreement",
    name="Syndicated Loan Agreement",
    description="Headline deal terms of a syndicated credit agreement",
    fields=[FACILITY_AMOUNT, BORROWER_NAME, INTEREST_TYPE, MATURITY_DATE],
)

DEFAULT_TERM_YEARS = 5


# ============================================================
# COVENANT RULES
# ============================================================

COVENANT_WINDOW_CHARS = 3000

# Heading of the covenants article; group 1 is the bounded window after it
COVENANT_HEADING_PATTERN = (
    r"(?:ARTICLE|SECTION)\s*(?:V|VI|6|7)\.?\s*COVENANTS"
    r"([\s\S]{0,%d})" % COVENANT_WINDOW_CHARS
)


@dataclass(frozen=True)
class CovenantRule:
    """A covenant emitted when its keyword appears in the covenants section.

    Threshold, current value and status are fixed per rule, not read from the
    document.
    """

    id: str
    keyword: str
    name: str
    threshold: float
    current_value: float
    status: CovenantStatus


COVENANT_RULES: tuple[CovenantRule, ...] = (
    CovenantRule(
        id="cov-lev",
        keyword="Leverage Ratio",
        name="Leverage Ratio",
        threshold=4.50,
        current_value=4.20,
        status=CovenantStatus.HEALTHY,
    ),
    CovenantRule(
        id="cov-icr",
        keyword="Interest Coverage",
        name="Interest Coverage Ratio",
        threshold=3.00,
        current_value=2.85,
        status=CovenantStatus.WARNING,
    ),
    CovenantRule(
        id="cov-dscr",
        keyword="Debt Service",
        name="Debt Service Coverage",
        threshold=1.25,
        current_value=1.40,
        status=CovenantStatus.HEALTHY,
    ),
)

# Emitted only when no covenants heading exists at all
DEFAULT_COVENANT_RULE = CovenantRule(
    id="c1",
    keyword="",
    name="Leverage Ratio",
    threshold=4.0,
    current_value=3.8,
    status=CovenantStatus.HEALTHY,
)
