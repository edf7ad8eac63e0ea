"""Tests for announcement files and result output."""

import json
from datetime import datetime, timezone
from pathlib import Path

from snowday.io import read_announcements, write_results
from snowday.types import MatchOutcome, ReconciledSchool, ReferenceSchool

NOW = datetime(2026, 1, 12, 6, 30, tzinfo=timezone.utc)


def test_read_csv(tmp_path: Path):
    path = tmp_path / "announcements.csv"
    path.write_text("name,status\nExample Public Schools,Closed\n,Closed\n Ida Schools ,Delayed\n")

    announcements = read_announcements(path)

    assert [a.name for a in announcements] == ["Example Public Schools", "Ida Schools"]
    assert announcements[0].is_closed is True
    assert announcements[1].is_closed is False


def test_read_jsonl(tmp_path: Path):
    path = tmp_path / "announcements.jsonl"
    path.write_text(
        '{"name": "Example Public Schools", "status": "CLOSED"}\n'
        "\n"
        '{"name": "Ida Schools"}\n'
    )

    announcements = read_announcements(path)

    assert len(announcements) == 2
    assert announcements[0].is_closed is True
    assert announcements[1].status == ""


def make_results() -> list[ReconciledSchool]:
    return [
        ReconciledSchool(
            ReferenceSchool("Example ISD", "Example County", "Example Schools"),
            MatchOutcome(True, 100.0, "Closed", "Example Public Schools", NOW),
        ),
        ReconciledSchool(
            ReferenceSchool("Example ISD", "Example County", "Ida Schools"),
            MatchOutcome(False, None, None, None, NOW),
        ),
    ]


def test_write_csv(tmp_path: Path):
    path = tmp_path / "results.csv"
    write_results(make_results(), path)

    lines = path.read_text().strip().split("\n")
    assert len(lines) == 3
    assert lines[0] == "district,county,school,closed,match_score,matched_source_name,original_status_text,checked_at"
    assert "Example Schools,True,100.00,Example Public Schools,Closed" in lines[1]
    assert "Ida Schools,False,,," in lines[2]


def test_write_jsonl(tmp_path: Path):
    path = tmp_path / "results.jsonl"
    write_results(make_results(), path)

    records = [json.loads(line) for line in path.read_text().splitlines()]
    assert records[0]["closed"] is True
    assert records[0]["match_score"] == 100.0
    assert records[1]["matched_source_name"] is None
