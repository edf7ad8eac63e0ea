"""CLI for the snowday closure service and offline reconciliation runs."""

import argparse
import asyncio
import sys
from datetime import datetime, timezone

import pandas as pd
import structlog

from snowday.aggregate import build_snapshot
from snowday.config import AppConfig, validate_source_url
from snowday.errors import ConfigurationError, SnowdayError
from snowday.io import read_announcements, result_rows, write_results
from snowday.logging import configure_logging
from snowday.matcher import Matcher
from snowday.normalize import normalize_name
from snowday.registry import Registry, load_registry
from snowday.school_types import type_signature
from snowday.source import AnnouncementSource
from snowday.types import Announcement, ReconciledSchool


def _build_config(args: argparse.Namespace) -> AppConfig:
    """Environment first, then CLI flags on top."""
    config = AppConfig.from_env()
    if getattr(args, "url", None):
        config.source.url = validate_source_url(args.url)
    if getattr(args, "registry", None):
        config.registry.path = args.registry
    if getattr(args, "state", None) is not None:
        config.registry.state = args.state or None
    if getattr(args, "host", None):
        config.server.host = args.host
    if getattr(args, "port", None):
        config.server.port = args.port
    if getattr(args, "interval", None):
        config.server.refresh_interval = args.interval
    return config


def _load_registry(config: AppConfig) -> Registry:
    return load_registry(config.registry.path, config.registry.state)


def cmd_serve(args: argparse.Namespace) -> None:
    import uvicorn

    from snowday.server import create_app
    from snowday.store import SnapshotStore

    log = structlog.get_logger()
    config = _build_config(args)
    registry = _load_registry(config)
    if not config.source.url:
        log.warning("source_url_missing", hint="set SNOWDAY_SOURCE_URL or pass --url")

    store = SnapshotStore(registry, AnnouncementSource(config.source))
    app = create_app(store, config)

    log.info(
        "server_start",
        host=config.server.host,
        port=config.server.port,
        schools=len(registry),
        refresh_interval=config.server.refresh_interval,
    )
    uvicorn.run(app, host=config.server.host, port=config.server.port, log_level="warning")


def _load_announcements(args: argparse.Namespace, config: AppConfig) -> list[Announcement]:
    if args.announcements:
        return read_announcements(args.announcements, config.source)
    return asyncio.run(AnnouncementSource(config.source).fetch())


def cmd_match(args: argparse.Namespace) -> None:
    log = structlog.get_logger()
    config = _build_config(args)
    registry = _load_registry(config)
    announcements = _load_announcements(args, config)
    log.info("announcements_loaded", count=len(announcements))

    matcher = Matcher(config.thresholds)
    now = datetime.now(timezone.utc)
    results = matcher.match_all(registry, announcements, now)
    snapshot = build_snapshot(results, registry, now, announcement_count=len(announcements))

    if args.show:
        _show_matches(results, config.thresholds.high_confidence)

    _print_summary(snapshot.metadata.total_schools, snapshot.metadata.closed_schools, matcher)
    all_closed = [d for d, s in snapshot.district_status.items() if s.all_closed]
    if all_closed:
        print(f"Districts fully closed: {', '.join(all_closed)}")

    if args.output:
        _write_output(results, args.output)
        print(f"\nSaved to: {args.output}")


def _write_output(results: list[ReconciledSchool], output: str) -> None:
    if output.endswith(".xlsx"):
        pd.DataFrame(result_rows(results)).to_excel(output, index=False)
    else:
        write_results(results, output)


def _show_matches(results: list[ReconciledSchool], high_confidence: float) -> None:
    """Display matches on screen, split into confidence bands."""
    df = pd.DataFrame(result_rows(results))
    if df.empty:
        print("\n=== No schools ===")
        return
    matches = df[df["match_score"].notna()].copy()
    if matches.empty:
        print("\n=== No matches found ===")
        return

    display_cols = ["school", "matched_source_name", "match_score", "closed", "district"]
    good = matches[matches["match_score"] >= high_confidence]
    questionable = matches[matches["match_score"] < high_confidence]

    print(f"\n=== High confidence matches (score >= {high_confidence:g}): {len(good)} ===")
    if not good.empty:
        print(good[display_cols].to_string(index=False))
    print(f"\n=== Questionable matches (score < {high_confidence:g}): {len(questionable)} ===")
    if not questionable.empty:
        print(questionable[display_cols].to_string(index=False))


def _print_summary(total: int, closed: int, matcher: Matcher) -> None:
    s = matcher.stats
    print("\n--- Statistics ---")
    print(f"Schools: {total}")
    print(f"Announcements: {s.announcements}")
    print(f"Comparisons: {s.comparisons}")
    print(f"Vetoed candidates: {s.vetoed}")
    print(f"Matched: {s.matched}")
    print(f"Closed: {closed}")


def cmd_clean(args: argparse.Namespace) -> None:
    """Show normalized forms and type signatures for names."""
    config = _build_config(args)
    names: list[tuple[str, str]] = []
    if args.announcements:
        names.extend(("announcement", a.name) for a in read_announcements(args.announcements))
    if args.registry or not args.announcements:
        names.extend(("registry", s.name) for s in _load_registry(config).schools)

    df = pd.DataFrame(
        [
            {
                "origin": origin,
                "original": name,
                "normalized": normalize_name(name),
                "types": type_signature(name),
            }
            for origin, name in names
        ],
        columns=["origin", "original", "normalized", "types"],
    )

    if args.filter:
        search = args.filter.lower()
        mask = df.apply(lambda row: any(search in str(v).lower() for v in row), axis=1)
        df = df[mask]
        print(f"=== Names matching '{args.filter}' ({len(df)} results) ===")

    if df.empty:
        print("  No names found.")
    else:
        print(df.to_string(index=False))


def main() -> None:
    # Parent parser with global options (inherited by all subcommands)
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set logging level (default: LOG_LEVEL or INFO)",
    )
    parent_parser.add_argument("--registry", help="Path to the reference registry JSON")
    parent_parser.add_argument(
        "--state",
        help="Top-level state key in the registry file (empty string for none)",
    )

    parser = argparse.ArgumentParser(
        description="School closure reconciliation",
        parents=[parent_parser],
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", parents=[parent_parser], help="Run the closure API")
    serve_parser.add_argument("--url", help="Closings page URL")
    serve_parser.add_argument("--host", help="Bind host")
    serve_parser.add_argument("--port", type=int, help="Bind port")
    serve_parser.add_argument("--interval", type=float, help="Refresh interval in seconds")
    serve_parser.set_defaults(func=cmd_serve)

    match_parser = subparsers.add_parser("match", parents=[parent_parser], help="Run one reconciliation pass")
    source_group = match_parser.add_mutually_exclusive_group()
    source_group.add_argument("--url", help="Closings page URL")
    source_group.add_argument("--announcements", help="CSV/JSONL file with name,status columns")
    match_parser.add_argument("--show", action="store_true", help="Display matches on screen")
    match_parser.add_argument("--output", help="Write results to .csv, .jsonl or .xlsx")
    match_parser.set_defaults(func=cmd_match)

    clean_parser = subparsers.add_parser("clean", parents=[parent_parser], help="Show normalized names")
    clean_parser.add_argument("--announcements", help="CSV/JSONL file with announcement names")
    clean_parser.add_argument("--filter", "-f", help="Only show rows containing this string (case-insensitive)")
    clean_parser.set_defaults(func=cmd_clean)

    args = parser.parse_args()
    configure_logging(args.log_level)
    try:
        args.func(args)
    except ConfigurationError as e:
        structlog.get_logger().error("configuration_error", error=str(e))
        sys.exit(2)
    except SnowdayError as e:
        structlog.get_logger().error("command_failed", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
