"""Covenant Section Locator.

Finds the covenants article by its heading, looks only at a bounded window
after it, and emits one covenant per known name found in that window.
"""

import re
from typing import Optional

from ..common.models import Covenant
from ..schemas.extraction_fields import (
    COVENANT_HEADING_PATTERN,
    COVENANT_RULES,
    DEFAULT_COVENANT_RULE,
    CovenantRule,
)

_COVENANT_HEADING_RE = re.compile(COVENANT_HEADING_PATTERN, re.IGNORECASE)


def _to_covenant(rule: CovenantRule) -> Covenant:
    return Covenant(
        id=rule.id,
        name=rule.name,
        threshold=rule.threshold,
        current_value=rule.current_value,
        status=rule.status,
    )


def locate_covenant_section(text: str) -> Optional[str]:
    """Return the text window after the covenants heading, or None if absent."""
    match = _COVENANT_HEADING_RE.search(text)
    if not match:
        return None
    return match.group(1)


def extract_covenants(text: str) -> list[Covenant]:
    """Covenants named in the covenants section.

    No heading at all yields the single default Leverage Ratio covenant. A
    heading whose window names no known covenant yields an empty list.
    """
    section = locate_covenant_section(text)
    if section is None:
        return [_to_covenant(DEFAULT_COVENANT_RULE)]

    section_lower = section.lower()
    return [
        _to_covenant(rule)
        for rule in COVENANT_RULES
        if rule.keyword.lower() in section_lower
    ]
