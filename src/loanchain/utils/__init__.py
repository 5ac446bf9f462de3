"""Utility modules for loan agreement extraction."""

from .validation import (
    add_years,
    parse_currency,
    parse_date,
    parse_leading_decimal,
    round_half_up,
)

__all__ = [
    "add_years",
    "parse_currency",
    "parse_date",
    "parse_leading_decimal",
    "round_half_up",
]
