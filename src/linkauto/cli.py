"""Command-line interface for linkauto."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import OUTPUT_FORMATS, load_config
from .definitions import DefinitionError
from .engine import run_link
from .link_state import LinkState
from .watcher import watch


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="linkauto",
        description="Automatically link defined terms in JSON documents",
    )
    parser.add_argument(
        "inputs",
        nargs="+",
        type=Path,
        help="Input JSON documents, or directories of them",
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to config YAML (default: ~/.config/linkauto/config.yaml)",
    )
    parser.add_argument(
        "--watch", "-w",
        action="store_true",
        help="Keep running and re-link inputs when they change",
    )
    parser.add_argument(
        "--format", "-f",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output format (overrides output_format from the config)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Threads used to filter definitions (default: one per CPU)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be written without writing files",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Re-link every input, even if unchanged since the last run",
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

    if args.format:
        config.output_format = args.format
    if args.workers is not None:
        config.max_workers = args.workers

    state = LinkState()
    if args.force:
        state.clear()

    try:
        if args.watch:
            watch(config, state, args.inputs, dry_run=args.dry_run)
            return
        written = run_link(config, state, args.inputs, dry_run=args.dry_run)
    except (FileNotFoundError, DefinitionError) as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1) from None

    if written:
        print(f"Linked {written} document(s)")
    else:
        print("Everything up to date")
