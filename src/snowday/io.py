"""CSV/JSONL input and output for offline reconciliation runs."""

from __future__ import annotations

import csv
import json
from pathlib import Path

from snowday.config import SourceConfig
from snowday.source import make_announcement
from snowday.types import Announcement, ReconciledSchool


def read_announcements(
    path: str | Path,
    config: SourceConfig | None = None,
    name_column: str = "name",
    status_column: str = "status",
) -> list[Announcement]:
    """Read announcements from CSV or JSONL. Rows with a blank name are skipped."""
    path = Path(path)

    if path.suffix == ".jsonl":
        rows = _read_jsonl(path)
    else:
        rows = _read_csv(path)

    results: list[Announcement] = []
    for row in rows:
        name = str(row.get(name_column) or "").strip()
        if not name:
            continue
        status = str(row.get(status_column) or "").strip()
        results.append(make_announcement(name, status, config))
    return results


def _read_csv(path: Path) -> list[dict]:
    with path.open(newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))


def _read_jsonl(path: Path) -> list[dict]:
    rows: list[dict] = []
    with path.open(encoding="utf-8") as f:
        for line in f:
            if not line.strip():
                continue
            rows.append(json.loads(line))
    return rows


FIELDNAMES = [
    "district", "county", "school", "closed", "match_score",
    "matched_source_name", "original_status_text", "checked_at",
]


def result_rows(results: list[ReconciledSchool]) -> list[dict]:
    return [
        {
            "district": r.school.district,
            "county": r.school.county,
            "school": r.school.name,
            "closed": r.outcome.closed,
            "match_score": r.outcome.match_score,
            "matched_source_name": r.outcome.matched_source_name,
            "original_status_text": r.outcome.original_status_text,
            "checked_at": r.outcome.checked_at.isoformat(),
        }
        for r in results
    ]


def write_results(results: list[ReconciledSchool], path: str | Path) -> None:
    """Write reconciled schools to CSV or JSONL."""
    path = Path(path)
    rows = result_rows(results)

    if path.suffix == ".jsonl":
        with path.open("w", encoding="utf-8") as f:
            for row in rows:
                f.write(json.dumps(row) + "\n")
        return

    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
        writer.writeheader()
        for row in rows:
            writer.writerow({
                **row,
                "match_score": f"{row['match_score']:.2f}" if row["match_score"] is not None else "",
                "matched_source_name": row["matched_source_name"] or "",
                "original_status_text": row["original_status_text"] or "",
            })
