"""Institution type detection for school names."""

from __future__ import annotations

from functools import lru_cache

# type -> substrings that indicate it
TYPE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "christian": ("christian",),
    "catholic": ("catholic",),
    "lutheran": ("lutheran",),
    "public": ("public",),
    "charter": ("charter",),
    "private": ("private",),
    "montessori": ("montessori",),
    "academy": ("academy", "acdmy"),
}

# Everything except "public" names a distinct kind of institution.
SPECIFIC_TYPES: frozenset[str] = frozenset(TYPE_KEYWORDS) - {"public"}

ALL_TYPE_WORDS: frozenset[str] = frozenset(
    word for words in TYPE_KEYWORDS.values() for word in words
)


def detect_types(name: str) -> set[str]:
    """Return the set of institution types mentioned in a name."""
    lower = (name or "").lower()
    return {
        kind
        for kind, words in TYPE_KEYWORDS.items()
        if any(w in lower for w in words)
    }


@lru_cache(maxsize=65536)
def type_signature(name: str) -> str:
    """Canonical signature, e.g. "academy,christian". Empty when no type found."""
    return ",".join(sorted(detect_types(name)))


def has_specific_type(signature: str) -> bool:
    return any(kind in SPECIFIC_TYPES for kind in signature.split(",") if kind)
