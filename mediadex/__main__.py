"""
mediadex - Command Line Entry Point

Usage:
    python -m mediadex scan PATH [--json] [--in DIR]
    python -m mediadex tree PATH
    python -m mediadex watch PATH

Or via the installed command:
    mediadex scan PATH
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import threading
from typing import Optional, Sequence

logger = logging.getLogger("mediadex")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mediadex",
        description="Index a directory into categorized media and keep it in sync"
    )

    parser.add_argument(
        "--version", "-v",
        action="store_true",
        help="Show version information"
    )

    parser.add_argument(
        "--log-level",
        metavar="LEVEL",
        help="Log level (DEBUG, INFO, WARNING, ERROR); defaults to the configured level"
    )

    parser.add_argument(
        "--no-log-file",
        action="store_true",
        help="Do not write the rotating log file"
    )

    commands = parser.add_subparsers(dest="command")

    scan = commands.add_parser("scan", help="Scan a directory once and print its categories")
    scan.add_argument("path", help="Root directory")
    scan.add_argument("--json", action="store_true", help="Print the snapshot as JSON")
    scan.add_argument("--in", dest="directory", metavar="DIR",
                      help="Only list entries located under DIR")

    tree = commands.add_parser("tree", help="Print the directory tree of a root")
    tree.add_argument("path", help="Root directory")

    watch = commands.add_parser("watch", help="Index a directory and report every update")
    watch.add_argument("path", help="Root directory")

    return parser


def _print_categories(snapshot, directory: Optional[str] = None) -> None:
    from mediadex.core.utils import format_file_size, format_timestamp, relative_to_root

    categories = snapshot.filter_by_directory(directory) if directory else snapshot.categories
    if not categories:
        print("No media files found.")
        return

    for label, entries in categories.items():
        print(f"{label} ({len(entries)})")
        for entry in entries:
            print(
                f"  {format_timestamp(entry.modified_at)}  "
                f"{format_file_size(entry.size_bytes):>10}  "
                f"{relative_to_root(entry.path, snapshot.root)}"
            )


def _print_tree(tree) -> None:
    for node, depth in tree.walk_with_depth():
        print(f"{'  ' * depth}{node.name}/")


def _snapshot_json(snapshot, directory: Optional[str] = None) -> str:
    categories = snapshot.filter_by_directory(directory) if directory else snapshot.categories
    return json.dumps({
        "root": snapshot.root,
        "generation": snapshot.generation,
        "directory": directory,
        "categories": {
            label: [entry.to_dict() for entry in entries]
            for label, entries in categories.items()
        },
        "tree": snapshot.tree.to_dict() if snapshot.tree else None,
    }, indent=2, ensure_ascii=False)


def _run_once(args) -> int:
    from mediadex.application.media_index import LoadCycle
    from mediadex.core.config import load_index_settings
    from mediadex.core.utils import format_elapsed
    from mediadex.domain.exceptions import MediaIndexError
    from mediadex.infrastructure.cache import ContentCache

    settings = load_index_settings()
    try:
        snapshot = LoadCycle(settings, ContentCache()).run(args.path, generation=1)
    except MediaIndexError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.command == "tree":
        if snapshot.tree is None:
            print("Root disappeared while building the tree.", file=sys.stderr)
            return 1
        _print_tree(snapshot.tree)
        return 0

    directory = os.path.abspath(args.directory) if args.directory else None
    if args.json:
        print(_snapshot_json(snapshot, directory))
        return 0

    _print_categories(snapshot, directory)
    stats = snapshot.stats
    print(
        f"\n{snapshot.entry_count} entries, {stats.files_excluded} excluded, "
        f"{stats.files_skipped} unreadable, {format_elapsed(stats.duration_seconds)}"
    )
    return 0


def _run_watch(args) -> int:
    from mediadex.application.media_index import MediaIndexer
    from mediadex.core.config import load_index_settings
    from mediadex.domain.exceptions import MediaIndexError

    stop = threading.Event()

    def on_snapshot(snapshot) -> None:
        summary = ", ".join(f"{label}: {count}" for label, count in snapshot.summary().items())
        print(f"[{snapshot.generation}] {snapshot.entry_count} entries ({summary or 'empty'})")

    def on_error(error: MediaIndexError) -> None:
        print(f"Error: {error}", file=sys.stderr)

    with MediaIndexer(settings=load_index_settings()) as indexer:
        indexer.subscribe(on_snapshot=on_snapshot, on_error=on_error)
        try:
            indexer.select_root(args.path)
        except MediaIndexError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        print(f"Watching {indexer.root} (Ctrl+C to stop)")
        try:
            while not stop.wait(0.5):
                pass
        except KeyboardInterrupt:
            print("\nStopping...")
    return 0


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    """
    Run the command line interface.

    Returns:
        int: Exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        from mediadex import __version__
        print(f"mediadex v{__version__}")
        return 0

    if not args.command:
        parser.print_help()
        return 2

    from mediadex.runtime.bootstrap import BootstrapError, bootstrap
    try:
        bootstrap(level=args.log_level, file_logging=False if args.no_log_file else None)
    except BootstrapError as e:
        print(f"Failed to initialize runtime: {e}", file=sys.stderr)
        return 1

    if args.command == "watch":
        return _run_watch(args)
    return _run_once(args)


def main() -> int:
    """Console script entry point."""
    return run_cli()


if __name__ == "__main__":
    sys.exit(run_cli())
