"""Command-line interface for timedivision."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import load_config
from .cycle import run_cycle
from .projector import summary_lines
from .watcher import watch


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="timedivision",
        description="Show how much session time each facilitator delivers in a SessionLab agenda",
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to config YAML (default: ~/.config/timedivision/config.yaml)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Update the time division once and exit (no daemon)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute the time division without writing the document",
    )

    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1) from None

    if args.once:
        result = run_cycle(config, dry_run=args.dry_run)
        if result is None:
            print("Session planner not found in document")
            return
        if not result.aggregate:
            print("No facilitators assigned")
        for line in summary_lines(result.aggregate):
            print(line)
        if not result.placed:
            print("Placement anchor not found; document not updated")
        elif args.dry_run:
            print(f"[DRY RUN] Would write {config.target_path}")
        elif result.stale:
            print("Document changed during update; not written")
        elif result.written:
            print(f"Panel written to {config.target_path}")
    else:
        watch(config, dry_run=args.dry_run)
