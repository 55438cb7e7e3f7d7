"""
Presentation helpers for agent rows: initials for the avatar fallback,
the starting date as shown in the row header and a tone for the
probation badge.
"""
from __future__ import annotations

from datetime import date
from typing import Optional

_PROBATION_TONES = {
    "ongoing": "warning",
    "passed": "success",
    "failed": "danger",
}


def initials(name: str) -> str:
    """'Jane van Doe' -> 'JVD'. Empty names fall back to 'U' (User)."""
    parts = [p for p in (name or "").split() if p]
    if not parts:
        return "U"
    return "".join(p[0] for p in parts).upper()


def format_starting_date(value: Optional[date]) -> str:
    """`date(2024, 1, 5)` -> 'Jan 5, 2024'; missing dates render as 'N/A'."""
    if value is None:
        return "N/A"
    return f"{value.strftime('%b')} {value.day}, {value.year}"


def probation_tone(status: str) -> str:
    return _PROBATION_TONES.get((status or "").strip().lower(), "info")
