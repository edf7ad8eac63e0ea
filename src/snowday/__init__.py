"""snowday - School closure reconciliation service."""

from snowday.config import AppConfig, Thresholds
from snowday.matcher import Matcher, MatcherStats
from snowday.registry import Registry, load_registry
from snowday.store import RefreshScheduler, SnapshotStore
from snowday.types import Announcement, MatchOutcome, ReferenceSchool, Snapshot

__all__ = [
    "Announcement",
    "AppConfig",
    "Matcher",
    "MatcherStats",
    "MatchOutcome",
    "ReferenceSchool",
    "RefreshScheduler",
    "Registry",
    "Snapshot",
    "SnapshotStore",
    "Thresholds",
    "load_registry",
]
