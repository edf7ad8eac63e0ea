"""School name normalization."""

from __future__ import annotations

import re
from functools import lru_cache

# Generic institutional phrases that carry no identifying information.
SUFFIX_PHRASES: tuple[str, ...] = (
    "intermediate school district",
    "public school district",
    "consolidated schools",
    "consolidated school",
    "community schools",
    "public schools",
    "school district",
    "area schools",
    "schools",
    "school",
)

_BARE_TOKENS = re.compile(r"\b(?:district|no\.?\s*\d+)\b")
_WHITESPACE = re.compile(r"\s+")


@lru_cache(maxsize=32)
def _phrase_pattern(phrases: tuple[str, ...]) -> re.Pattern[str]:
    # Longest first so "public schools" wins over "schools" at the same position,
    # independent of the order the caller lists them in.
    ordered = sorted({p.lower() for p in phrases if p.strip()}, key=lambda p: (-len(p), p))
    if not ordered:
        return re.compile(r"(?!)")
    return re.compile(r"\b(?:" + "|".join(re.escape(p) for p in ordered) + r")\b")


def strip_phrases(name: str, pattern: re.Pattern[str]) -> str:
    """Remove generic phrases and tokens until nothing more can be removed."""
    s = name
    while True:
        stripped = pattern.sub(" ", s)
        stripped = _BARE_TOKENS.sub(" ", stripped)
        stripped = _WHITESPACE.sub(" ", stripped).strip()
        if stripped == s:
            return s
        s = stripped


@lru_cache(maxsize=65536)
def normalize_name(name: str, phrases: tuple[str, ...] = SUFFIX_PHRASES) -> str:
    """Lower-case a school name and strip generic institutional suffixes.

    Total over strings: empty or suffix-only names normalize to "".
    """
    if not name:
        return ""
    return strip_phrases(_WHITESPACE.sub(" ", name.lower()).strip(), _phrase_pattern(phrases))
