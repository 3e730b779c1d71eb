from __future__ import annotations

import argparse
from pathlib import Path

from .analysis_run import run_analysis
from .config import DEFAULT_CONFIG_PATH

EXAMPLES = """\
examples:
  git-authorship                                   all authors in the current repo
  git-authorship /path/to/project                  all authors in another repo
  git-authorship https://github.com/user/repo      clone to a temp dir and analyze
  git-authorship https://github.com/user/repo --branch develop
  git-authorship . "John Doe"                      per-file line counts for one author
"""


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-authorship",
        description="Attribute every line of a git repository to its last author (git blame) and rank authors by line count.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("target", nargs="?", default=".", help="Repository directory or remote URL (default: current directory).")
    parser.add_argument("author", nargs="?", default="", help="Show per-file line counts for this exact author name.")
    parser.add_argument("--branch", type=str, default="", help="Clone this branch (remote targets only).")
    parser.add_argument("--tag", type=str, default="", help="Clone this tag (remote targets only).")
    parser.add_argument("--keep-clone", action="store_true", help="Do not delete the temporary clone of a remote target.")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to an optional JSON config file.")
    parser.add_argument("--jobs", type=int, default=0, help="Concurrent git blame processes (default: config `jobs` or 50).")
    parser.add_argument("--top", type=int, default=0, help="Rows to show in ranked tables (default: config `top_n` or 20).")
    parser.add_argument(
        "--exclude",
        type=str,
        action="append",
        default=[],
        metavar="GLOB",
        help="Extra exclude glob, relative to the repo root (repeatable).",
    )
    parser.add_argument("--json", type=Path, default=None, metavar="PATH", help="Also write the results as JSON to PATH.")
    return parser


def main(argv: list[str]) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    return run_analysis(args=args)
