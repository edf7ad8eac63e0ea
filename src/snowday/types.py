"""Core types for the snowday closure reconciliation engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class Announcement:
    """One published row of closure information."""

    name: str
    status: str
    is_closed: bool = False


@dataclass(frozen=True)
class ReferenceSchool:
    district: str
    county: str
    name: str


@dataclass
class ScoredCandidate:
    """Score of one announcement against one reference school."""

    source_index: int
    score: float
    features: dict[str, float] = field(default_factory=dict)


@dataclass
class GuardVerdict:
    acceptable: bool
    reason: str


@dataclass
class MatchOutcome:
    closed: bool
    match_score: float | None
    original_status_text: str | None
    matched_source_name: str | None
    checked_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "closed": self.closed,
            "matchScore": self.match_score,
            "originalStatusText": self.original_status_text,
            "matchedSourceName": self.matched_source_name,
            "checkedAt": self.checked_at.isoformat(),
        }


@dataclass
class ReconciledSchool:
    school: ReferenceSchool
    outcome: MatchOutcome


@dataclass(frozen=True)
class DistrictStatus:
    all_closed: bool
    closed_count: int
    total_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "allClosed": self.all_closed,
            "closedCount": self.closed_count,
            "totalCount": self.total_count,
        }


@dataclass(frozen=True)
class SnapshotMetadata:
    last_updated: datetime | None = None
    total_schools: int = 0
    closed_schools: int = 0
    announcement_count: int = 0
    fetch_error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "lastUpdated": self.last_updated.isoformat() if self.last_updated else None,
            "totalSchools": self.total_schools,
            "closedSchools": self.closed_schools,
            "announcementCount": self.announcement_count,
            "fetchError": self.fetch_error,
        }


# district -> county -> school name -> outcome
ClosureMap = dict[str, dict[str, dict[str, MatchOutcome]]]


@dataclass(frozen=True)
class Snapshot:
    """The published reconciliation result. Replaced wholesale, never mutated."""

    closures: ClosureMap = field(default_factory=dict)
    metadata: SnapshotMetadata = field(default_factory=SnapshotMetadata)
    district_status: dict[str, DistrictStatus] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "closuresByDistrictAndCounty": {
                district: {
                    county: {name: outcome.to_dict() for name, outcome in schools.items()}
                    for county, schools in counties.items()
                }
                for district, counties in self.closures.items()
            },
            "metadata": self.metadata.to_dict(),
            "districtStatus": {
                district: status.to_dict()
                for district, status in self.district_status.items()
            },
        }
