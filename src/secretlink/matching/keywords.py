"""
Keyword normalization for secretlink.

Normalized keywords are used only to compare identifiers. Displayed
keywords always keep their original spelling.
"""

from __future__ import annotations

_TRIM_CHARS = " \t\r\n-_"


def normalize_keyword(raw: str) -> str:
    """
    Map a raw keyword to its canonical comparison form.

    Surrounding whitespace, hyphens and underscores are trimmed and the
    result is lower-cased, so "Cisco-Meraki" and " cisco-meraki " compare
    equal. Never fails.

    Args:
        raw: Keyword as found in a rule or detector

    Returns:
        Normalized keyword (possibly empty)
    """
    if not raw:
        return ""
    return raw.strip(_TRIM_CHARS).lower()


def same_keyword(a: str, b: str) -> bool:
    """True when two raw keywords name the same identifier."""
    return normalize_keyword(a) == normalize_keyword(b)
