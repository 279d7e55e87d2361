"""Text normalization shared by matching and mapping code."""

from __future__ import annotations

import re

_WHITESPACE = re.compile(r"\s+")


def normalize_description(value: str | None) -> str:
    """Normalize a free-text description for comparisons.

    - Casefolds
    - Collapses runs of whitespace into a single space
    - Strips surrounding whitespace

    Returns an empty string for None.
    """
    if value is None:
        return ""
    return _WHITESPACE.sub(" ", value.casefold()).strip()


def excerpt(value: object, limit: int = 200) -> str:
    """Return a truncated repr suitable for log lines."""
    text = repr(value)
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
