"""Match selection: pick the best acceptable announcement for every reference school."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

import structlog

from snowday.config import Thresholds
from snowday.guard import check_pair
from snowday.registry import Registry
from snowday.scoring import score_pair
from snowday.types import (
    Announcement,
    MatchOutcome,
    ReconciledSchool,
    ReferenceSchool,
    ScoredCandidate,
)

log = structlog.get_logger()


class Scorer(Protocol):
    """Scores an announced name against a reference name, 0-100.

    Replaces the default ``score_pair`` scoring, which also records features.
    """

    def __call__(self, source: str, target: str) -> float: ...


class Guard(Protocol):
    """Returns False to veto a candidate pair."""

    def __call__(self, source: str, target: str) -> bool: ...


@dataclass
class MatcherStats:
    """Statistics collected during a reconciliation pass."""

    schools: int = 0
    announcements: int = 0
    comparisons: int = 0
    vetoed: int = 0
    matched: int = 0
    closed: int = 0


class Matcher:
    """Reconciles announcements against the reference registry."""

    def __init__(
        self,
        thresholds: Thresholds | None = None,
        scorer: Scorer | None = None,
        guard: Guard | None = None,
    ) -> None:
        self.thresholds = thresholds or Thresholds()
        self.scorer: Scorer | None = scorer
        self.guard: Guard = guard or self._default_guard
        self.stats = MatcherStats()

    def _default_guard(self, source: str, target: str) -> bool:
        verdict = check_pair(source, target, self.thresholds)
        if not verdict.acceptable:
            log.debug("candidate_vetoed", source=source, target=target, reason=verdict.reason)
        return verdict.acceptable

    def _score(self, index: int, announcement: Announcement, school: ReferenceSchool) -> ScoredCandidate:
        if self.scorer is None:
            return score_pair(announcement.name, school.name, source_index=index)
        return ScoredCandidate(
            source_index=index, score=self.scorer(announcement.name, school.name)
        )

    def best_match(
        self, school: ReferenceSchool, announcements: list[Announcement]
    ) -> ScoredCandidate | None:
        """Highest-scoring acceptable announcement for a school.

        Every announcement is scanned; on an exact score tie the earlier
        announcement is kept. The returned candidate's ``source_index``
        points into ``announcements``.
        """
        best: ScoredCandidate | None = None
        best_score = self.thresholds.match
        for index, announcement in enumerate(announcements):
            candidate = self._score(index, announcement, school)
            self.stats.comparisons += 1
            # Only a strict improvement can replace the current best, so the
            # guard is skipped for candidates that could never win.
            if candidate.score <= best_score:
                continue
            if not self.guard(announcement.name, school.name):
                self.stats.vetoed += 1
                continue
            best, best_score = candidate, candidate.score
        return best

    def match_school(
        self,
        school: ReferenceSchool,
        announcements: list[Announcement],
        checked_at: datetime | None = None,
    ) -> MatchOutcome:
        checked_at = checked_at or datetime.now(timezone.utc)
        best = self.best_match(school, announcements)
        if best is None:
            return MatchOutcome(
                closed=False,
                match_score=None,
                original_status_text=None,
                matched_source_name=None,
                checked_at=checked_at,
            )

        announcement = announcements[best.source_index]
        self.stats.matched += 1
        if announcement.is_closed:
            self.stats.closed += 1
        log.debug(
            "school_matched",
            school=school.name,
            district=school.district,
            county=school.county,
            matched=announcement.name,
            score=round(best.score, 2),
            closed=announcement.is_closed,
            **{k: round(v, 2) for k, v in best.features.items()},
        )
        return MatchOutcome(
            closed=announcement.is_closed,
            match_score=best.score,
            original_status_text=announcement.status,
            matched_source_name=announcement.name,
            checked_at=checked_at,
        )

    def match_all(
        self,
        registry: Registry,
        announcements: list[Announcement],
        checked_at: datetime | None = None,
    ) -> list[ReconciledSchool]:
        """Reconcile every reference school against the announcement list."""
        checked_at = checked_at or datetime.now(timezone.utc)
        self.stats = MatcherStats(schools=len(registry), announcements=len(announcements))
        log.info("match_all_start", schools=len(registry), announcements=len(announcements))

        results = [
            ReconciledSchool(school, self.match_school(school, announcements, checked_at))
            for school in registry.schools
        ]

        log.info(
            "match_all_done",
            matched=self.stats.matched,
            closed=self.stats.closed,
            vetoed=self.stats.vetoed,
            comparisons=self.stats.comparisons,
        )
        return results
