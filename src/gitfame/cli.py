from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .blame import BlameParseError, LogParseError
from .config import ConfigError, build_options, load_config
from .git import GitCommandError
from .ranking import ORDER_KEYS
from .render import FORMATS
from .run import run_fame

EXIT_CONFIG_ERROR = 1
EXIT_GIT_ERROR = 7


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gitfame", description="Per-author lines, commits and files of a git tree, computed from git blame.")
    parser.add_argument("--repository", type=Path, default=None, help="Path to the git repository (default: current directory).")
    parser.add_argument("--revision", type=str, default=None, help="Revision to attribute (default: HEAD).")
    parser.add_argument("--order-by", dest="order_by", type=str, default=None, help=f"Sort key: {', '.join(ORDER_KEYS)} (default: lines).")
    parser.add_argument("--use-committer", dest="use_committer", action=argparse.BooleanOptionalAction, default=None, help="Attribute lines to the committer instead of the author.")
    parser.add_argument("--format", type=str, default=None, help=f"Output format: {', '.join(FORMATS)} (default: tabular).")
    parser.add_argument("--extensions", type=str, default=None, help="Comma-separated extensions to keep, e.g. '.go,.md'.")
    parser.add_argument("--languages", type=str, default=None, help="Comma-separated language names to keep, e.g. 'go,markdown'.")
    parser.add_argument("--exclude", type=str, default=None, help="Comma-separated glob patterns of paths to drop.")
    parser.add_argument("--restrict-to", dest="restrict_to", type=str, default=None, help="Comma-separated glob patterns; keep only matching paths.")
    parser.add_argument("--jobs", type=int, default=None, help="Parallel git blame jobs.")
    parser.add_argument("--language-table", dest="language_table", type=Path, default=None, help="Path to a language_extensions.json table.")
    parser.add_argument("--progress", action=argparse.BooleanOptionalAction, default=None, help="Print progress to stderr.")
    parser.add_argument("--config", type=Path, default=None, help="JSON file with default values for the options above.")
    return parser


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = _build_parser().parse_args(argv)

    try:
        config = load_config(args.config) if args.config else {}
        options = build_options(args, config)
        output = run_fame(options)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except (GitCommandError, BlameParseError, LogParseError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_GIT_ERROR

    sys.stdout.write(output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
