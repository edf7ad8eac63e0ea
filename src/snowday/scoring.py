"""Similarity scoring between announced and reference school names."""

from __future__ import annotations

from rapidfuzz import fuzz

from snowday.normalize import normalize_name
from snowday.types import ScoredCandidate


def normalized_ratio(source: str, target: str) -> float:
    """Full-string edit ratio on the normalized forms (0 when either is empty)."""
    a = normalize_name(source)
    b = normalize_name(target)
    if not a or not b:
        return 0.0
    return fuzz.ratio(a, b)


def score_pair(source: str, target: str, source_index: int = 0) -> ScoredCandidate:
    """Score an announced name (source) against a reference name (target).

    Two views are compared and the better one wins: the normalized forms,
    which tolerate abbreviated or reordered announcements, and the raw
    lower-cased names, which reward announcements that keep the full name.
    """
    features: dict[str, float] = {}

    a = normalize_name(source)
    b = normalize_name(target)
    if a and b:
        features["ratio"] = fuzz.ratio(a, b)
        features["partial_ratio"] = fuzz.partial_ratio(a, b)
        features["token_sort_ratio"] = fuzz.token_sort_ratio(a, b)
    else:
        features["ratio"] = features["partial_ratio"] = features["token_sort_ratio"] = 0.0
    normalized_score = max(
        features["ratio"], features["partial_ratio"], features["token_sort_ratio"]
    )
    features["normalized_score"] = normalized_score

    full_a = (source or "").lower().strip()
    full_b = (target or "").lower().strip()
    features["full_score"] = fuzz.ratio(full_a, full_b)

    score = max(0.0, min(100.0, max(normalized_score, features["full_score"])))
    features["final_score"] = score

    return ScoredCandidate(source_index=source_index, score=score, features=features)
