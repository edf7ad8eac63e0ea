"""Tests for the HTTP serving layer."""

import asyncio

from fastapi.testclient import TestClient

from snowday.config import AppConfig
from snowday.errors import UpstreamError
from snowday.registry import Registry
from snowday.server import create_app, etag_matches
from snowday.source import make_announcement
from snowday.store import SnapshotStore

REGISTRY = Registry.from_mapping({
    "Example ISD": {"Example County": ["Example Schools"]},
    "Empty ISD": {},
})

CLOSED = [make_announcement("Example Public Schools", "Closed")]


class FakeSource:
    def __init__(self, *results):
        self.results = list(results)

    async def fetch(self):
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, BaseException):
            raise result
        return result


def make_client(*results) -> tuple[TestClient, SnapshotStore]:
    store = SnapshotStore(REGISTRY, FakeSource(*results))
    asyncio.run(store.refresh())
    app = create_app(store, AppConfig(), start_scheduler=False)
    return TestClient(app), store


def test_closures_payload_and_cache_headers():
    client, store = make_client(CLOSED)
    resp = client.get("/api/closures")

    assert resp.status_code == 200
    assert resp.headers["etag"] == store.etag()
    assert "max-age=60" in resp.headers["cache-control"]
    assert resp.headers["x-last-updated"] == store.current().metadata.last_updated.isoformat()
    assert "last-modified" in resp.headers

    body = resp.json()
    school = body["closuresByDistrictAndCounty"]["Example ISD"]["Example County"]["Example Schools"]
    assert school["closed"] is True
    assert school["matchedSourceName"] == "Example Public Schools"
    assert set(school) == {"closed", "matchScore", "originalStatusText", "matchedSourceName", "checkedAt"}
    assert school["originalStatusText"] == "Closed"
    assert body["metadata"]["closedSchools"] == 1
    assert body["metadata"]["fetchError"] is None
    assert body["districtStatus"]["Example ISD"]["allClosed"] is True
    assert body["districtStatus"]["Empty ISD"]["allClosed"] is False


def test_matching_etag_returns_not_modified():
    client, store = make_client(CLOSED)
    resp = client.get("/api/closures", headers={"If-None-Match": store.etag()})
    assert resp.status_code == 304
    assert resp.content == b""
    assert resp.headers["etag"] == store.etag()


def test_stale_etag_returns_full_body():
    client, _ = make_client(CLOSED)
    resp = client.get("/api/closures", headers={"If-None-Match": '"stale"'})
    assert resp.status_code == 200
    assert resp.json()["metadata"]["totalSchools"] == 1


def test_etag_matching_rules():
    assert etag_matches('"abc"', '"abc"')
    assert etag_matches('W/"abc"', '"abc"')
    assert etag_matches('"x", "abc"', '"abc"')
    assert etag_matches("*", '"abc"')
    assert not etag_matches(None, '"abc"')
    assert not etag_matches('"abd"', '"abc"')


def test_health_reports_degraded_after_failure():
    client, store = make_client(CLOSED, UpstreamError("timed out"))
    assert client.get("/api/health").json()["healthy"] is True

    asyncio.run(store.refresh())

    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {
        "healthy": False,
        "lastUpdated": store.current().metadata.last_updated.isoformat(),
        "error": "timed out",
    }

    closures = client.get("/api/closures")
    assert closures.status_code == 200
    assert closures.json()["metadata"]["closedSchools"] == 1
    assert closures.json()["metadata"]["fetchError"] == "timed out"


def test_district_endpoint():
    client, _ = make_client(CLOSED)
    resp = client.get("/api/districts/Example ISD")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == {"allClosed": True, "closedCount": 1, "totalCount": 1}
    assert body["counties"]["Example County"]["Example Schools"]["closed"] is True


def test_unknown_district_is_404():
    client, _ = make_client(CLOSED)
    assert client.get("/api/districts/Nowhere ISD").status_code == 404


def test_health_unhealthy_before_first_refresh():
    store = SnapshotStore(REGISTRY, FakeSource(CLOSED))
    client = TestClient(create_app(store, AppConfig(), start_scheduler=False))

    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"healthy": False, "lastUpdated": None, "error": None}
