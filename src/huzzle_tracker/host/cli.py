"""Command-line host for the tracker.

Plays the editor's role: loads the plugin, registers its commands, and runs
one of them against a markdown file.

Usage:
    python -m huzzle_tracker.host.cli update-list notes/Huzzles.md
    python -m huzzle_tracker.host.cli update-list notes/Huzzles.md --dry-run
    python -m huzzle_tracker.host.cli update-list notes/Huzzles.md --source https://example.com/level-1/
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from huzzle_tracker.config import load_settings
from huzzle_tracker.errors import UnknownCommandError
from huzzle_tracker.host.plugin import UPDATE_LIST_COMMAND, CommandRegistry, FileBuffer, HuzzlesTracker, StringBuffer

logger = logging.getLogger(__name__)


def _notify(message: str) -> None:
    """User-facing notifications go to stderr so --dry-run output stays clean."""
    print(message, file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="huzzles-tracker", description="Keep a Hanayama Huzzles table in a markdown note up to date.")
    parser.add_argument("command", nargs="?", default=UPDATE_LIST_COMMAND, help=f"command to run (default: {UPDATE_LIST_COMMAND})")
    parser.add_argument("path", type=Path, help="markdown file holding (or receiving) the table")
    parser.add_argument("--source", action="append", dest="sources", metavar="URL", help="listing page to scrape; repeatable, replaces the configured sources")
    parser.add_argument("--dry-run", action="store_true", help="print the updated document instead of writing it")
    parser.add_argument("--timeout", type=float, default=None, help="overall fetch deadline in seconds")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run the requested command, return a process exit code."""
    logging.basicConfig(
        level=getattr(logging, os.getenv("HUZZLES_LOG_LEVEL", "INFO").upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    args = build_parser().parse_args(argv)

    settings = load_settings(
        sources=tuple(args.sources) if args.sources else None,
        fetch_deadline=args.timeout,
    )
    tracker = HuzzlesTracker(settings, notify=_notify)
    registry = CommandRegistry()
    tracker.on_load(registry)

    file_buffer = FileBuffer(args.path)
    buffer = StringBuffer(file_buffer.get_value()) if args.dry_run else file_buffer

    try:
        registry.invoke(args.command, buffer)
    except UnknownCommandError as exc:
        available = ", ".join(command.command_id for command in registry.commands())
        _notify(f"{exc}. Available commands: {available}")
        return 1

    if tracker.last_result is None:
        return 1
    if args.dry_run:
        sys.stdout.write(buffer.get_value())
    return 0


if __name__ == "__main__":
    sys.exit(main())
