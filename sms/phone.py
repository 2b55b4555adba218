"""Phone number helpers."""

from __future__ import annotations

import re
from typing import Iterable

_NOT_DIALABLE = re.compile(r"[^\d+]")


def normalize_phone_number(phone_number: str) -> str:
    """
    Format a number as international, assuming Australia when no country code.

    Only digits and '+' are kept. '+...' is left alone, a leading 0 becomes
    +61, a bare mobile number (4...) gets +61, anything else just gets '+'.
    """

    cleaned = _NOT_DIALABLE.sub("", phone_number)

    if cleaned.startswith("+"):
        return cleaned
    if cleaned.startswith("0"):
        return "+61" + cleaned[1:]
    if cleaned.startswith("4"):
        return "+61" + cleaned
    return "+" + cleaned


def dedupe_numbers(numbers: Iterable[str]) -> list[str]:
    """Trim entries and drop blanks and exact duplicates, keeping order."""

    seen: list[str] = []
    for raw in numbers:
        number = raw.strip()
        if number and number not in seen:
            seen.append(number)
    return seen
