"""Command-line entrypoint."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import TextIO

from scoop_search.config import (
    CliOverrides,
    apply_cli_overrides,
    default_config,
    load_effective_config,
    resolve_scoop_root,
)
from scoop_search.index import ReconcileStats, SearchHit
from scoop_search.session import create_session

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = "No results found."
TABLE_HEADERS = ("Name", "Version", "Source")


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for a search invocation."""
    parser = argparse.ArgumentParser(
        prog="scoop-search",
        description="Search package manifests across local scoop buckets.",
    )
    parser.add_argument("query", nargs="?", default=None)
    parser.add_argument("--root", required=False, default=None, help="Scoop root directory.")
    parser.add_argument("--index", required=False, default=None, help="Index file path.")
    parser.add_argument(
        "--no-update",
        action="store_true",
        help="Do not run the bucket update command when nothing matches.",
    )
    parser.add_argument(
        "--reindex",
        action="store_true",
        help="Reconcile changed buckets and print what changed.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print matches as JSON; the no-results notice goes to stderr.",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def format_table(hits: list[SearchHit]) -> str:
    """Render hits as left-aligned Name/Version/Source columns."""
    rows = [TABLE_HEADERS] + [(hit.name, hit.version, hit.source) for hit in hits]
    widths = [max(len(row[column]) for row in rows) for column in range(len(TABLE_HEADERS))]
    divider = tuple("-" * len(header) for header in TABLE_HEADERS)
    lines = []
    for row in [rows[0], divider, *rows[1:]]:
        cells = [value.ljust(width) for value, width in zip(row, widths, strict=True)]
        lines.append("  ".join(cells).rstrip())
    return "\n".join(lines) + "\n"


def format_json(hits: list[SearchHit]) -> str:
    return json.dumps([asdict(hit) for hit in hits], sort_keys=True) + "\n"


def format_stats(stats: ReconcileStats) -> str:
    lines = [
        f"Buckets rescanned: {len(stats.changed_buckets)}",
        f"Added: {stats.added}",
        f"Updated: {stats.updated}",
        f"Removed: {stats.removed}",
    ]
    if stats.orphaned_buckets:
        lines.append(f"Missing buckets kept in index: {', '.join(stats.orphaned_buckets)}")
    return "\n".join(lines) + "\n"


def main(argv: list[str] | None = None, out_stream: TextIO | None = None) -> int:
    """Entrypoint for the scoop-search command."""
    out = out_stream or sys.stdout
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    if args.query is None and not args.reindex:
        parser.print_usage(out)
        return 0

    overrides = CliOverrides(
        scoop_root=Path(args.root).expanduser() if args.root is not None else None,
        index_path=Path(args.index).expanduser() if args.index is not None else None,
        refresh_enabled=False if args.no_update else None,
    )
    try:
        config = load_effective_config(overrides=overrides)
    except ValueError as error:
        logger.warning("Ignoring configuration file: %s", error)
        root = overrides.scoop_root or resolve_scoop_root()
        config = apply_cli_overrides(default_config(root), overrides)
    logger.debug("Effective config: %s", json.dumps(config.to_public_dict(), sort_keys=True))

    session = create_session(config)
    if args.reindex:
        out.write(format_stats(session.reindex()))
        if args.query is None:
            return 0

    result = session.lookup(args.query)
    if args.json:
        out.write(format_json(result.hits))
        if not result.hits:
            print(NO_RESULTS_MESSAGE, file=sys.stderr)
        return 0
    if not result.hits:
        out.write(f"{NO_RESULTS_MESSAGE}\n")
        return 0
    out.write(format_table(result.hits))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
