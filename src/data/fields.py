"""Tolerant coercions for loosely-formatted PetPlace fields.

Every function here is total: malformed or absent input yields ``None``
(or ``""`` for display names) rather than an exception, so a record with a
strange field still normalizes.
"""

from __future__ import annotations

import math
import re
from datetime import UTC, datetime
from typing import Any

import pandas as pd

AVAILABLE_STATUS = "available"

_NUMBER_RE = re.compile(r"([0-9]+(?:\.[0-9]+)?)")
_HREF_RE = re.compile(r'href="([^"]+)"', re.IGNORECASE)
_AVAILABLE_RE = re.compile(r"available for adoption", re.IGNORECASE)
_TRAILING_PAREN_RE = re.compile(r"\s*\([^)]*\)\s*$")

# Range of the integer database columns.
INT_COLUMN_MIN = -(2**31)
INT_COLUMN_MAX = 2**31 - 1


def to_str_or_none(value: Any) -> str | None:
    """Pass strings through and stringify other non-null scalars.

    Integral floats render without the trailing ``.0`` so that ids sent as
    JSON numbers keep their natural form. Booleans render as JSON literals.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_weight(value: Any) -> float | None:
    """Extract the first numeric substring, e.g. ``"68 lbs"`` -> ``68.0``."""
    if not value:
        return None
    match = _NUMBER_RE.search(str(value))
    return float(match.group(1)) if match else None


def parse_date(value: Any) -> str | None:
    """Parse a date in any common format into a ``YYYY-MM-DD`` string.

    Time and zone information is discarded after conversion to UTC. ISO
    dates outside pandas' timestamp range, such as the ``0001-01-01``
    placeholder, are still accepted.
    """
    if not value:
        return None
    text = str(value).strip()
    try:
        parsed = pd.to_datetime(text, errors="coerce", utc=True)
    except (ValueError, TypeError, OverflowError):
        parsed = pd.NaT
    if pd.isna(parsed):
        parsed = _parse_iso_datetime(text)
        if parsed is None:
            return None
    return f"{parsed.year:04d}-{parsed.month:02d}-{parsed.day:02d}"


def _parse_iso_datetime(text: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(text)
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(UTC)
    except (ValueError, OverflowError):
        return None
    return parsed


def parse_website_url(value: Any) -> str | None:
    """Return the ``href`` of an HTML anchor, or the text unchanged."""
    if not value:
        return None
    text = str(value)
    match = _HREF_RE.search(text)
    return match.group(1) if match else text


def infer_status(text: str | None) -> str | None:
    """Return ``"available"`` when the text says the dog is up for adoption.

    Only this one phrase is recognized; every other wording maps to ``None``.
    """
    if not text:
        return None
    return AVAILABLE_STATUS if _AVAILABLE_RE.search(text) else None


def split_display_name(full_name: str | None) -> str:
    """Strip a trailing ``" (A1042472)"`` style suffix from a full name."""
    if not full_name:
        return ""
    return _TRAILING_PAREN_RE.sub("", full_name).strip()


def parse_int(value: Any) -> int | None:
    """Parse a whole number that fits an integer column, else ``None``."""
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or not number.is_integer():
        return None
    if not INT_COLUMN_MIN <= number <= INT_COLUMN_MAX:
        return None
    return int(number)


def parse_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None
