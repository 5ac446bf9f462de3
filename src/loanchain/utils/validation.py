"""Value parsing utilities for extracted agreement data.

Both extraction paths hand back loosely formatted values: the local engine
works on matched text fragments, the remote model answers with whatever JSON
types it chooses. These helpers turn either into the model's canonical types.
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

_LEADING_DECIMAL = re.compile(r"\d*\.?\d*")
_MONTH_DAY_YEAR = re.compile(r"^([A-Za-z]+)\.?\s+(\d{1,2}),\s*(\d{4})$")

_MONTH_NAMES = [
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
]

# Common date formats to try, month-name formats first
DATE_FORMATS = [
    "%B %d, %Y",
    "%b %d, %Y",
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%m-%d-%Y",
    "%m/%d/%y",
]


def parse_leading_decimal(value: str) -> Decimal:
    """Parse the numeric prefix of a string such as '3.50' or '1,200.5.'.

    Raises:
        ValueError: if the string does not start with a number
    """
    match = _LEADING_DECIMAL.match(str(value).strip())
    number = match.group(0) if match else ""
    if not number or number == ".":
        raise ValueError(f"No number in: {value!r}")
    return Decimal(number)


def round_half_up(amount: Decimal) -> int:
    """Round to an integer, half away from zero (whole dollars, basis points).

    Raises:
        ValueError: if the amount is not finite or has more digits than the
            decimal context can hold
    """
    if not amount.is_finite():
        raise ValueError(f"Not a finite amount: {amount}")
    try:
        return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except InvalidOperation as e:
        raise ValueError(f"Amount out of range: {amount}") from e


def parse_currency(value: Any) -> int:
    """Parse a currency value into whole dollars.

    Accepts numbers and strings like "$250,000,000", "250 million" or
    "$1.2 billion".

    Raises:
        ValueError: if no finite amount can be read
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a currency amount: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return round_half_up(Decimal(str(value)))

    text = str(value).strip()
    lowered = text.lower()
    cleaned = re.sub(r"[$€£¥,\s]", "", text)
    cleaned = re.sub(r"[a-zA-Z]+$", "", cleaned)

    # Handle parentheses for negative (accounting format)
    if cleaned.startswith("(") and cleaned.endswith(")"):
        cleaned = "-" + cleaned[1:-1]

    try:
        amount = Decimal(cleaned)
    except InvalidOperation as e:
        raise ValueError(f"Cannot parse currency from: {value!r}") from e

    if "billion" in lowered:
        amount *= 1_000_000_000
    elif "million" in lowered:
        amount *= 1_000_000
    return round_half_up(amount)


def _month_number(word: str) -> Optional[int]:
    """Month for a name or any prefix of it of three or more letters ('Sept')."""
    word = word.lower()
    if len(word) < 3:
        return None
    for number, name in enumerate(_MONTH_NAMES, start=1):
        if name.startswith(word):
            return number
    return None


def parse_date(value: Any) -> str:
    """Parse and normalize a date to ISO format.

    Returns the input unchanged (stripped) when no known format matches.
    """
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, date):
        return value.isoformat()

    date_str = str(value).strip()

    for fmt in DATE_FORMATS:
        try:
            parsed = datetime.strptime(date_str, fmt)
            return parsed.strftime("%Y-%m-%d")
        except ValueError:
            continue

    # Irregular month abbreviations such as "Sept 5, 2025"
    match = _MONTH_DAY_YEAR.match(date_str)
    if match:
        month = _month_number(match.group(1))
        if month is not None:
            try:
                return date(int(match.group(3)), month, int(match.group(2))).isoformat()
            except ValueError:
                pass

    # Return as-is if can't parse
    return date_str


def add_years(start: date, years: int) -> date:
    """Shift a date by whole years; Feb 29 rolls over to Mar 1."""
    try:
        return start.replace(year=start.year + years)
    except ValueError:
        return date(start.year + years, 3, 1)
