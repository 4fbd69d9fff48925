"""
Strict date parsing for imported rent-roll values.

Imported lease dates arrive in whatever format the source spreadsheet used.
normalize_date tries a fixed, ordered list of formats and stores the first strict
match as DD-MM-YYYY. Anything that does not match is kept as the trimmed raw
string and flagged invalid so the UI can highlight it.

Ambiguous inputs such as 01-02-2024 resolve by list order: YYYY-MM-DD, then
MM-DD-YYYY, then DD-MM-YYYY.
Values typed into the edit form are already DD-MM-YYYY; normalize_entered_date
keeps those as sent instead of re-reading them month first.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

CANONICAL_FORMAT = "DD-MM-YYYY"

DATE_FORMATS = (
    "YYYY-MM-DD",
    "MM-DD-YYYY",
    "DD-MM-YYYY",
    "MM/DD/YYYY",
    "DD/MM/YYYY",
    "YYYY/MM/DD",
    "MMM DD, YYYY",
    "DD MMM YYYY",
    "YYYYMMDD",
    "MMDDYYYY",
)

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

_TOKEN_RE = re.compile(r"YYYY|MMM|MM|DD")
_TOKEN_PATTERNS = {
    "YYYY": r"(?P<year>[0-9]{4})",
    "MMM": r"(?P<mon>" + "|".join(MONTH_ABBR) + r")",
    "MM": r"(?P<month>[0-9]{2})",
    "DD": r"(?P<day>[0-9]{2})",
}


@dataclass(frozen=True)
class DateParseResult:
    value: Optional[str]
    invalid: bool


def _compile(fmt: str) -> re.Pattern:
    parts = []
    pos = 0
    for m in _TOKEN_RE.finditer(fmt):
        parts.append(re.escape(fmt[pos:m.start()]))
        parts.append(_TOKEN_PATTERNS[m.group(0)])
        pos = m.end()
    parts.append(re.escape(fmt[pos:]))
    return re.compile("".join(parts))


_COMPILED = [(fmt, _compile(fmt)) for fmt in DATE_FORMATS]
_BY_FORMAT = dict(_COMPILED)
_CANONICAL = _BY_FORMAT[CANONICAL_FORMAT]
_COMPARABLE = [_CANONICAL, _BY_FORMAT["YYYY-MM-DD"]]


def _match(pattern: re.Pattern, text: str) -> Optional[date]:
    m = pattern.fullmatch(text)
    if not m:
        return None
    parts = m.groupdict()
    month = MONTH_ABBR.index(parts["mon"]) + 1 if parts.get("mon") else int(parts["month"])
    try:
        return date(int(parts["year"]), month, int(parts["day"]))
    except ValueError:
        # Shape matched but the calendar date does not exist (e.g. 31-02-2024).
        return None


def strict_parse(text: str, fmt: str) -> Optional[date]:
    """Parse text with exactly one of DATE_FORMATS; None if it does not match strictly."""
    return _match(_BY_FORMAT[fmt], text)


def format_canonical(d: date) -> str:
    return f"{d.day:02d}-{d.month:02d}-{d.year:04d}"


def normalize_date(value: Any) -> DateParseResult:
    """Return (DD-MM-YYYY, False) on the first strict match, else (trimmed raw, True)."""
    if value is None or str(value).strip() == "":
        return DateParseResult(value=None, invalid=False)
    raw = str(value).strip()
    for _fmt, pattern in _COMPILED:
        parsed = _match(pattern, raw)
        if parsed is not None:
            return DateParseResult(value=format_canonical(parsed), invalid=False)
    return DateParseResult(value=raw, invalid=True)


def normalize_entered_date(value: Any) -> DateParseResult:
    """
    Like normalize_date, but a value already in DD-MM-YYYY is kept as is.
    Manual edits send back stored values, which must not be re-read month first.
    """
    if value is not None:
        raw = str(value).strip()
        if _match(_CANONICAL, raw) is not None:
            return DateParseResult(value=raw, invalid=False)
    return normalize_date(value)


def to_comparable_date(value: Any) -> Optional[date]:
    """
    Turn a stored lease date into a date for arithmetic.
    Accepts date objects and strict DD-MM-YYYY / YYYY-MM-DD strings; anything else is None.
    """
    if value is None:
        return None
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    for pattern in _COMPARABLE:
        parsed = _match(pattern, text)
        if parsed is not None:
            return parsed
    return None


def parse_query_date(value: str) -> date:
    """Window bound from a query string. Raises ValueError for non-comparable input."""
    parsed = to_comparable_date(value)
    if parsed is None:
        raise ValueError(f"Invalid date {value!r}; expected DD-MM-YYYY or YYYY-MM-DD")
    return parsed
