"""Utility helpers for the ReelScout service."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any


YEAR_RE = re.compile(r"\d{4}")
TITLE_YEAR_RE = re.compile(r"\((\d{4})\)")
MISSING_VALUES = {"", "n/a", "unknown"}


def current_year() -> int:
    """Return the calendar year used for recency heuristics."""

    return datetime.utcnow().year


def extract_numeric_year(value: Any) -> int | None:
    """Return the first four-digit year found in ``value``."""

    if isinstance(value, int):
        return value
    if not value:
        return None
    match = YEAR_RE.search(str(value))
    if not match:
        return None
    return int(match.group(0))


def extract_year_from_title(title: str) -> str | None:
    """Pull a parenthesised year out of titles like ``Movie (2020)``."""

    match = TITLE_YEAR_RE.search(title or "")
    return match.group(1) if match else None


def clean_text(value: Any) -> str | None:
    """Return stripped text, treating ``N/A`` style placeholders as missing."""

    if value is None:
        return None
    text = str(value).strip()
    if text.lower() in MISSING_VALUES:
        return None
    return text


def parse_rating(value: Any) -> float | None:
    """Parse a 0-10 rating, returning ``None`` for anything unusable."""

    text = clean_text(value)
    if text is None:
        return None
    try:
        rating = float(text)
    except ValueError:
        return None
    if rating != rating or rating < 0 or rating > 10:
        return None
    return rating


def ensure_url(value: Any) -> str | None:
    if isinstance(value, str) and value.startswith("http"):
        return value
    return None


def year_from_date(value: Any) -> str | None:
    """Return the year prefix of an ISO date string such as ``2022-03-04``."""

    if not isinstance(value, str) or len(value) < 4:
        return None
    prefix = value[:4]
    return prefix if prefix.isdigit() else None
