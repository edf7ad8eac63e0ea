"""Roll per-school outcomes up into per-district closure status."""

from __future__ import annotations

from datetime import datetime

from snowday.registry import Registry
from snowday.types import (
    ClosureMap,
    DistrictStatus,
    ReconciledSchool,
    Snapshot,
    SnapshotMetadata,
)


def district_status(reconciled: list[ReconciledSchool], registry: Registry) -> dict[str, DistrictStatus]:
    """Closed/total counts per district. Districts without schools are never all-closed."""
    totals = {district: 0 for district in registry.districts}
    closed = {district: 0 for district in registry.districts}
    for item in reconciled:
        district = item.school.district
        totals[district] = totals.get(district, 0) + 1
        if item.outcome.closed:
            closed[district] = closed.get(district, 0) + 1

    return {
        district: DistrictStatus(
            all_closed=total > 0 and closed.get(district, 0) == total,
            closed_count=closed.get(district, 0),
            total_count=total,
        )
        for district, total in totals.items()
    }


def closure_map(reconciled: list[ReconciledSchool], registry: Registry) -> ClosureMap:
    closures: ClosureMap = {
        district: {county: {} for county in counties}
        for district, counties in registry.layout
    }
    for item in reconciled:
        school = item.school
        counties = closures.setdefault(school.district, {})
        counties.setdefault(school.county, {})[school.name] = item.outcome
    return closures


def build_snapshot(
    reconciled: list[ReconciledSchool],
    registry: Registry,
    refreshed_at: datetime,
    announcement_count: int = 0,
) -> Snapshot:
    """Assemble a complete snapshot from one successful reconciliation pass."""
    statuses = district_status(reconciled, registry)
    return Snapshot(
        closures=closure_map(reconciled, registry),
        metadata=SnapshotMetadata(
            last_updated=refreshed_at,
            total_schools=sum(s.total_count for s in statuses.values()),
            closed_schools=sum(s.closed_count for s in statuses.values()),
            announcement_count=announcement_count,
            fetch_error=None,
        ),
        district_status=statuses,
    )
