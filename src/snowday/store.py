"""Snapshot store: keeps the latest reconciliation result live and serves it."""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import hashlib
import json
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Protocol

import httpx
import structlog

from snowday.aggregate import build_snapshot
from snowday.errors import SnowdayError
from snowday.matcher import Matcher
from snowday.registry import Registry
from snowday.types import Announcement, Snapshot

log = structlog.get_logger()


class AnnouncementFetcher(Protocol):
    """Anything that can produce the current announcement list."""

    async def fetch(self) -> list[Announcement]: ...


@dataclass(frozen=True)
class Published:
    """A snapshot together with its serialized body and ETag."""

    snapshot: Snapshot
    body: bytes
    etag: str

    @classmethod
    def of(cls, snapshot: Snapshot) -> Published:
        body = json.dumps(snapshot.to_dict(), sort_keys=True, separators=(",", ":")).encode("utf-8")
        etag = '"' + hashlib.sha256(body).hexdigest()[:32] + '"'
        return cls(snapshot=snapshot, body=body, etag=etag)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SnapshotStore:
    """Holds exactly one current snapshot.

    Readers take `self._published` in a single attribute read, so they see
    either the old or the new snapshot, never a mix.
    """

    def __init__(
        self,
        registry: Registry,
        source: AnnouncementFetcher,
        matcher: Matcher | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.registry = registry
        self.source = source
        self.matcher = matcher or Matcher()
        self.clock = clock
        self._published = Published.of(Snapshot())
        self._lock = asyncio.Lock()

    def current(self) -> Snapshot:
        return self._published.snapshot

    def etag(self) -> str:
        return self._published.etag

    def published(self) -> Published:
        return self._published

    def health(self) -> dict[str, Any]:
        meta = self._published.snapshot.metadata
        return {
            "healthy": meta.last_updated is not None and meta.fetch_error is None,
            "lastUpdated": meta.last_updated.isoformat() if meta.last_updated else None,
            "error": meta.fetch_error,
        }

    @property
    def refreshing(self) -> bool:
        return self._lock.locked()

    async def refresh(self) -> Snapshot:
        """Run one full reconciliation pass. Never raises."""
        if self._lock.locked():
            log.info("refresh_skipped", reason="already_in_flight")
            return self.current()

        async with self._lock:
            started = self.clock()
            log.info("refresh_start")
            try:
                announcements = await self.source.fetch()
                # Matching is CPU-bound; keep the event loop free for readers.
                reconciled = await asyncio.to_thread(
                    self.matcher.match_all, self.registry, announcements, started
                )
                snapshot = build_snapshot(
                    reconciled,
                    self.registry,
                    refreshed_at=started,
                    announcement_count=len(announcements),
                )
            except (SnowdayError, httpx.HTTPError) as e:
                log.error("refresh_failed", error=str(e), error_type=type(e).__name__)
                self._record_failure(started, str(e))
                return self.current()
            except Exception as e:
                log.exception("refresh_crashed", error=str(e))
                self._record_failure(started, f"{type(e).__name__}: {e}")
                return self.current()

            self._published = Published.of(snapshot)
            log.info(
                "refresh_done",
                announcements=len(announcements),
                schools=snapshot.metadata.total_schools,
                closed=snapshot.metadata.closed_schools,
            )
            return snapshot

    def _record_failure(self, when: datetime, error: str) -> None:
        """Patch metadata only; closures and district status stay as they were."""
        previous = self._published.snapshot
        patched = dataclasses.replace(
            previous,
            metadata=dataclasses.replace(previous.metadata, last_updated=when, fetch_error=error),
        )
        self._published = Published.of(patched)


class RefreshScheduler:
    """Calls `store.refresh()` on a fixed period; cycles never overlap."""

    def __init__(self, store: SnapshotStore, interval: float) -> None:
        self.store = store
        self.interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        log.info("scheduler_start", interval=self.interval)
        self._task = asyncio.create_task(self._run())

    async def _run(self) -> None:
        while True:
            await self.store.refresh()
            await asyncio.sleep(self.interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        log.info("scheduler_stopped")
