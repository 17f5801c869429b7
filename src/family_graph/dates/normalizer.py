# src/family_graph/dates/normalizer.py

from __future__ import annotations

import re
from datetime import date
from typing import Dict, Optional


# ---------------------------------------------------------------------------
# Month helpers
# ---------------------------------------------------------------------------

MONTHS = {
    "JAN": 1,
    "FEB": 2,
    "MAR": 3,
    "APR": 4,
    "MAY": 5,
    "JUN": 6,
    "JUL": 7,
    "AUG": 8,
    "SEP": 9,
    "SEPT": 9,
    "OCT": 10,
    "NOV": 11,
    "DEC": 12,
}


def _month_number(token: str) -> Optional[int]:
    t = token.strip(".,").upper()
    if t in MONTHS:
        return MONTHS[t]
    # Full month names: "April", "september"
    if len(t) > 3 and t[:3] in MONTHS:
        return MONTHS[t[:3]]
    return None


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

_ISO_RE = re.compile(r"^(\d{4})(?:[-/.](\d{1,2})(?:[-/.](\d{1,2}))?)?$")
_DAY_MONTH_YEAR_RE = re.compile(r"^(\d{1,2})\s+([A-Za-z.]+),?\s+(\d{4})$")
_MONTH_DAY_YEAR_RE = re.compile(r"^([A-Za-z.]+)\s+(\d{1,2}),?\s+(\d{4})$")
_MONTH_YEAR_RE = re.compile(r"^([A-Za-z.]+)\s+(\d{4})$")


def _build(year: int, month: int = 1, day: int = 1) -> Optional[str]:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def parse_date(raw: Optional[str]) -> Dict[str, Optional[str]]:
    """
    Parse a loosely formatted calendar date.

    Returns a dict with:
      - raw:        the input string, stripped
      - date:       ISO ``YYYY-MM-DD`` or None if it could not be read
      - precision:  ``year`` / ``month`` / ``day`` / None

    Missing parts default to the first month / first day, so ``"1985"``
    becomes ``"1985-01-01"``.
    """
    text = (raw or "").strip()
    result: Dict[str, Optional[str]] = {"raw": text, "date": None, "precision": None}
    if not text:
        return result

    m = _ISO_RE.match(text)
    if m:
        year = int(m.group(1))
        month = int(m.group(2)) if m.group(2) else None
        day = int(m.group(3)) if m.group(3) else None
        result["date"] = _build(year, month or 1, day or 1)
        result["precision"] = "day" if day else ("month" if month else "year")
        return result

    m = _DAY_MONTH_YEAR_RE.match(text)
    if m:
        month = _month_number(m.group(2))
        if month:
            result["date"] = _build(int(m.group(3)), month, int(m.group(1)))
            result["precision"] = "day"
        return result

    m = _MONTH_DAY_YEAR_RE.match(text)
    if m:
        month = _month_number(m.group(1))
        if month:
            result["date"] = _build(int(m.group(3)), month, int(m.group(2)))
            result["precision"] = "day"
        return result

    m = _MONTH_YEAR_RE.match(text)
    if m:
        month = _month_number(m.group(1))
        if month:
            result["date"] = _build(int(m.group(2)), month)
            result["precision"] = "month"
        return result

    return result


def normalize_date(raw: Optional[str]) -> Optional[str]:
    """ISO date for ``raw``, or None when it is empty or unreadable."""
    if raw is None:
        return None
    return parse_date(str(raw))["date"]
