"""Date parsing utilities for regulatory documents."""

import re
from datetime import date
from typing import Optional

from dateutil.parser import parse as dateutil_parse


ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
ISO_DATE_IN_TEXT = re.compile(r"\b(\d{4}-\d{2}-\d{2})\b")
SPELLED_OUT_DATE = re.compile(
    r"\b(january|february|march|april|may|june|july|august|september|october|november|december"
    r"|jan\.?|feb\.?|mar\.?|apr\.?|jun\.?|jul\.?|aug\.?|sept?\.?|oct\.?|nov\.?|dec\.?)"
    r"\s+([0-3]?\d)(?:st|nd|rd|th)?,?\s*(\d{4})",
    re.IGNORECASE,
)
NUMERIC_DATE = re.compile(r"\b(0?[1-9]|1[0-2])[/-](0?[1-9]|[12]\d|3[01])[/-](\d{4})\b")


def normalize_iso_date(value) -> Optional[str]:
    """Return ``value`` if it is a valid ``YYYY-MM-DD`` string, else None."""
    if not isinstance(value, str):
        return None

    trimmed = value.strip()
    if not ISO_DATE_PATTERN.match(trimmed):
        return None

    try:
        return date.fromisoformat(trimmed).isoformat()
    except ValueError:
        return None


def _to_iso(year: int, month: int, day: int) -> Optional[str]:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def parse_effective_date_text(value) -> Optional[str]:
    """Find the earliest date mentioned in free text.

    Handles formats like:
    - "2024-01-05"
    - "This rule is effective January 5, 2024."
    - "effective 1/5/2024"

    Args:
        value: Text (possibly with inline markup) to scan

    Returns:
        Earliest ISO date found or None
    """
    if not isinstance(value, str):
        return None

    cleaned = re.sub(r"<[^>]*>", " ", value)
    cleaned = cleaned.replace("&nbsp;", " ")
    cleaned = re.sub(r"[–—]", "-", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    if not cleaned:
        return None

    candidates = set()

    for match in ISO_DATE_IN_TEXT.finditer(cleaned):
        iso = normalize_iso_date(match.group(1))
        if iso:
            candidates.add(iso)

    for match in SPELLED_OUT_DATE.finditer(cleaned):
        try:
            parsed = dateutil_parse(match.group(0), fuzzy=True)
        except (ValueError, OverflowError):
            continue
        candidates.add(parsed.date().isoformat())

    for match in NUMERIC_DATE.finditer(cleaned):
        iso = _to_iso(int(match.group(3)), int(match.group(1)), int(match.group(2)))
        if iso:
            candidates.add(iso)

    if not candidates:
        return None

    return sorted(candidates)[0]
