"""CLI log inspector: list, read, and search the active log file and its backups."""

import argparse
import sys

from logroller.config import load_config, load_yaml_config
from logroller.inspector import list_log_files, read_file, search_files


def _format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    elif size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect a rolled log file and its backups")
    parser.add_argument("--config", default=None, help="Path to YAML roller config")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--list", action="store_true", help="List the active file and backups")
    group.add_argument("--read", metavar="FILENAME", help="Read a specific log file")
    group.add_argument("--search", metavar="TEXT", help="Search text across all log files")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    config = load_config(load_yaml_config(args.config))

    if args.list:
        files = list_log_files(config)
        if not files:
            print("No log files found.")
            return
        for info in files:
            when = "active" if info.timestamp is None else info.timestamp.isoformat()
            print(f"  {info.name}  ({_format_size(info.size)}, {when})")

    elif args.read:
        try:
            sys.stdout.write(read_file(config, args.read))
        except FileNotFoundError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

    elif args.search:
        results = search_files(config, args.search)
        if not results:
            print(f"No matches found for '{args.search}'.")
            return
        for filename, line_num, line in results:
            print(f"  [{filename}:{line_num}] {line}")


if __name__ == "__main__":
    main()
