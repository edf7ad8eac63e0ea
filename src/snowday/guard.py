"""Conflict guard: veto candidate matches that are similar for the wrong reasons."""

from __future__ import annotations

from snowday.config import Thresholds
from snowday.normalize import normalize_name
from snowday.school_types import ALL_TYPE_WORDS, has_specific_type, type_signature
from snowday.scoring import normalized_ratio
from snowday.types import GuardVerdict

# Generic geographic/administrative words that never identify a school on their own.
STOP_WORDS: frozenset[str] = frozenset({
    "community",
    "area",
    "public",
    "school",
    "district",
    "city",
    "township",
    "county",
}) | ALL_TYPE_WORDS


def significant_words(normalized: str) -> set[str]:
    return {
        w for w in normalized.split()
        if len(w) > 2 and w not in STOP_WORDS
    }


def check_pair(
    source: str,
    target: str,
    thresholds: Thresholds | None = None,
) -> GuardVerdict:
    """Decide whether source may be matched to target at all."""
    t = thresholds or Thresholds()
    a = normalize_name(source)
    b = normalize_name(target)
    ratio = normalized_ratio(source, target)

    # 1. Type conflict, e.g. a public district vs. a Christian academy
    sig_a = type_signature(source)
    sig_b = type_signature(target)
    if sig_a and sig_b and sig_a != sig_b:
        if has_specific_type(sig_a) or has_specific_type(sig_b):
            if ratio < t.type_override:
                return GuardVerdict(False, f"type_conflict:{sig_a}|{sig_b}")

    # 2. Short names are too ambiguous for loose matching
    if len(a) < t.short_name_length or len(b) < t.short_name_length:
        if a == b or ratio >= t.short_name:
            return GuardVerdict(True, "short_name_match")
        return GuardVerdict(False, "short_name_mismatch")

    # 3. Anchor the match on a distinguishing word
    words_a = significant_words(a)
    words_b = significant_words(b)
    if not words_a or not words_b:
        if ratio >= t.no_significant_words:
            return GuardVerdict(True, "no_significant_words_high_ratio")
        return GuardVerdict(False, "no_significant_words")

    if not words_a & words_b:
        return GuardVerdict(False, "no_shared_word")
    if ratio < t.shared_word:
        return GuardVerdict(False, "low_ratio")
    return GuardVerdict(True, "shared_word")
