"""Pattern Extraction Engine - headline deal terms from agreement text.

Each rule is a pure function of the text buffer and falls back to its
field's default on a miss, so one missing term never blocks another.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ..schemas.extraction_fields import (
    BORROWER_NAME,
    DEFAULT_TERM_YEARS,
    FACILITY_AMOUNT,
    INTEREST_TYPE,
    LOAN_AGREEMENT_SCHEMA,
    MATURITY_DATE,
)
from ..utils.validation import add_years, parse_date, parse_leading_decimal, round_half_up

_PATTERNS = {f.id: f.compile() for f in LOAN_AGREEMENT_SCHEMA.fields}

_BILLION = Decimal(1_000_000_000)
_MILLION = Decimal(1_000_000)


@dataclass
class PatternFields:
    """Headline terms found by the pattern engine.

    ``matched`` records which fields came from the document; the others hold
    their defaults.
    """

    borrower: str
    facility_amount: int
    interest_type: str
    maturity_date: str
    matched: dict[str, bool] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "borrower": self.borrower,
            "facilityAmount": self.facility_amount,
            "interestType": self.interest_type,
            "maturityDate": self.maturity_date,
            "matched": dict(self.matched),
        }


def parse_amount(token: str) -> Optional[int]:
    """Convert a matched currency token such as '$1.2 billion' to whole dollars.

    The million/billion test runs on the whole token, not just the unit word.
    Tokens too large to represent yield None so the default applies.
    """
    digits = re.sub(r"[^0-9.]", "", token)
    lowered = token.lower()
    try:
        amount = parse_leading_decimal(digits)
        if "billion" in lowered:
            amount *= _BILLION
        elif "million" in lowered:
            amount *= _MILLION
        return round_half_up(amount)
    except (ValueError, InvalidOperation):
        return None


def match_facility_amount(text: str) -> Optional[int]:
    match = _PATTERNS[FACILITY_AMOUNT.id].search(text)
    if not match:
        return None
    return parse_amount(match.group(FACILITY_AMOUNT.capture_group))


def extract_facility_amount(text: str) -> int:
    """First dollar amount in the text, or the 100,000,000 default."""
    amount = match_facility_amount(text)
    return FACILITY_AMOUNT.default_value if amount is None else amount


def match_borrower(text: str) -> Optional[str]:
    match = _PATTERNS[BORROWER_NAME.id].search(text)
    if not match:
        return None
    name = match.group(BORROWER_NAME.capture_group).strip()[: BORROWER_NAME.max_length]
    return name or None


def extract_borrower(text: str) -> str:
    """Name after a 'Borrower:' style label, ending at a comma or ' and'."""
    name = match_borrower(text)
    return BORROWER_NAME.default_value if name is None else name


def match_interest_type(text: str) -> Optional[str]:
    match = _PATTERNS[INTEREST_TYPE.id].search(text)
    if not match:
        return None
    try:
        percent = parse_leading_decimal(match.group(INTEREST_TYPE.capture_group))
        bps = round_half_up(percent * 100)
    except (ValueError, InvalidOperation):
        return None
    return f"SOFR + {bps}bps"


def extract_interest_type(text: str) -> str:
    """Margin over the benchmark as 'SOFR + <bps>bps'."""
    rate = match_interest_type(text)
    return INTEREST_TYPE.default_value if rate is None else rate


def default_maturity_date(today: Optional[date] = None) -> str:
    """Today (UTC) plus the default term, ISO formatted."""
    if today is None:
        today = datetime.now(timezone.utc).date()
    return add_years(today, DEFAULT_TERM_YEARS).isoformat()


def match_maturity_date(text: str) -> Optional[str]:
    match = _PATTERNS[MATURITY_DATE.id].search(text)
    if not match:
        return None
    # Tokens like "Section 5, 2024" do not parse and are kept verbatim
    return parse_date(match.group(MATURITY_DATE.capture_group))


def extract_maturity_date(text: str, today: Optional[date] = None) -> str:
    """First 'Month day, year' after a maturity/termination label."""
    maturity = match_maturity_date(text)
    return default_maturity_date(today) if maturity is None else maturity


def extract_fields(text: str, today: Optional[date] = None) -> PatternFields:
    """Run the full rule battery over the text buffer."""
    amount = match_facility_amount(text)
    borrower = match_borrower(text)
    rate = match_interest_type(text)
    maturity = match_maturity_date(text)

    return PatternFields(
        borrower=BORROWER_NAME.default_value if borrower is None else borrower,
        facility_amount=FACILITY_AMOUNT.default_value if amount is None else amount,
        interest_type=INTEREST_TYPE.default_value if rate is None else rate,
        maturity_date=default_maturity_date(today) if maturity is None else maturity,
        matched={
            FACILITY_AMOUNT.id: amount is not None,
            BORROWER_NAME.id: borrower is not None,
            INTEREST_TYPE.id: rate is not None,
            MATURITY_DATE.id: maturity is not None,
        },
    )
