"""FastAPI server publishing the current closure snapshot."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from email.utils import format_datetime
from typing import Any

import structlog
from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from snowday.config import AppConfig
from snowday.store import Published, RefreshScheduler, SnapshotStore

log = structlog.get_logger()


class HealthResponse(BaseModel):
    """Service health derived from the last refresh attempt."""

    healthy: bool
    lastUpdated: str | None
    error: str | None


class DistrictResponse(BaseModel):
    """One district's schools and roll-up status."""

    district: str
    status: dict[str, Any]
    counties: dict[str, dict[str, dict[str, Any]]]
    lastUpdated: str | None


def etag_matches(if_none_match: str | None, etag: str) -> bool:
    """Compare an If-None-Match header against the current ETag."""
    if not if_none_match:
        return False
    for candidate in if_none_match.split(","):
        candidate = candidate.strip()
        if candidate == "*":
            return True
        if candidate.startswith("W/"):
            candidate = candidate[2:]
        if candidate == etag:
            return True
    return False


def _cache_headers(published: Published, max_age: int) -> dict[str, str]:
    headers = {
        "ETag": published.etag,
        "Cache-Control": f"public, max-age={max_age}",
    }
    last_updated = published.snapshot.metadata.last_updated
    if last_updated is not None:
        headers["Last-Modified"] = format_datetime(last_updated, usegmt=True)
        headers["X-Last-Updated"] = last_updated.isoformat()
    return headers


def create_app(
    store: SnapshotStore,
    config: AppConfig | None = None,
    start_scheduler: bool = True,
) -> FastAPI:
    """Create the FastAPI application around a snapshot store."""
    config = config or AppConfig()
    scheduler = RefreshScheduler(store, config.server.refresh_interval)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if start_scheduler:
            scheduler.start()
        yield
        await scheduler.stop()

    app = FastAPI(title="snowday", lifespan=lifespan)
    app.state.store = store
    app.state.scheduler = scheduler

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.allowed_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=["ETag", "X-Last-Updated"],
    )

    @app.get("/api/closures")
    async def get_closures(request: Request) -> Response:
        """Full snapshot: closures, metadata and district status."""
        # One read so the body and ETag always belong to the same snapshot
        published = store.published()
        headers = _cache_headers(published, config.server.max_age)
        if etag_matches(request.headers.get("if-none-match"), published.etag):
            return Response(status_code=304, headers=headers)
        return Response(
            content=published.body,
            media_type="application/json",
            headers=headers,
        )

    @app.get("/api/districts/{district}")
    async def get_district(district: str) -> DistrictResponse:
        """Closures and status for a single district."""
        snapshot = store.current()
        if district not in snapshot.district_status:
            raise HTTPException(status_code=404, detail="District not found")
        last_updated = snapshot.metadata.last_updated
        return DistrictResponse(
            district=district,
            status=snapshot.district_status[district].to_dict(),
            counties={
                county: {name: outcome.to_dict() for name, outcome in schools.items()}
                for county, schools in snapshot.closures.get(district, {}).items()
            },
            lastUpdated=last_updated.isoformat() if last_updated else None,
        )

    @app.get("/api/health")
    async def get_health() -> HealthResponse:
        """Degraded when the latest refresh failed; never an error status."""
        return HealthResponse(**store.health())

    return app
