from __future__ import annotations

import argparse
import subprocess
from pathlib import Path
from typing import Callable

from .analysis_aggregate import aggregate_authors, aggregate_user_files
from .analysis_files import discover_files, validate_directory
from .analysis_paths import compile_exclusion_policy
from .analysis_pool import run_pool
from .analysis_remote import cleanup_temp_dir, clone_repository, install_cleanup_handlers, is_remote_url
from .analysis_render import BANNER, Progress, print_error, render_general, render_user
from .analysis_write import tally_to_json, write_json
from .config import Settings, load_config, resolve_settings
from .git import extract_authors, repo_rel_path
from .models import AuthorTally, FileTally


def format_startup_header(*, target: str, author: str, settings: Settings) -> str:
    lines = [
        BANNER,
        "",
        f"- Target: {target}",
        f"- Mode: {'per-file lines for ' + repr(author) if author else 'all authors'}",
        f"- Jobs: {settings.jobs}  Top: {settings.top_n}  Ignore file: {settings.ignore_file}",
        "",
    ]
    return "\n".join(lines)


def analyze_files(
    files: list[Path],
    repo_root: Path,
    *,
    jobs: int,
    author: str = "",
    on_progress: Callable[[int, int], None] | None = None,
) -> tuple[AuthorTally | FileTally, list[str]]:
    """
    Blame `files` concurrently and fold the results. Returns the tally plus one
    error string per file whose blame failed (those count as zero lines).
    """

    def blame_one(path: Path) -> tuple[str, list[str] | int, list[str]]:
        errs: list[str] = []
        res = extract_authors(path, repo_root, author or None, errors=errs)
        return repo_rel_path(path, repo_root), res, errs

    results = run_pool(files, jobs, blame_one, on_progress)
    errors = [e for _rel, _res, errs in results for e in errs]

    tally: AuthorTally | FileTally
    if author:
        tally = aggregate_user_files(author, ((rel, int(res)) for rel, res, _errs in results), files_processed=len(files))
    else:
        tally = aggregate_authors((res for _rel, res, _errs in results), files_processed=len(files))
    return tally, errors


def run_analysis(*, args: argparse.Namespace) -> int:
    try:
        config = load_config(args.config)
    except (ValueError, OSError) as e:
        # json.JSONDecodeError is a ValueError
        print_error(f"Invalid config {args.config}: {e}")
        return 2
    try:
        settings = resolve_settings(config, args)
    except ValueError as e:
        print_error(f"Invalid settings: {e}")
        return 2

    target = str(args.target or ".")
    author = str(args.author or "")
    print(format_startup_header(target=target, author=author, settings=settings))

    temp_dir: Path | None = None
    if is_remote_url(target):
        try:
            temp_dir = clone_repository(target, branch=str(args.branch or ""), tag=str(args.tag or ""))
        except (RuntimeError, OSError, subprocess.SubprocessError) as e:
            print_error(f"Failed to clone repository: {e}")
            return 1
        if not args.keep_clone:
            install_cleanup_handlers(temp_dir)
        repo_root = temp_dir.resolve()
        print(f"Analyzing remote repository: {target}")
    else:
        try:
            repo_root = validate_directory(Path(target).expanduser())
        except ValueError as e:
            print_error(str(e))
            return 1
        print(f"Scanning directory: {repo_root}")

    try:
        return _analyze(repo_root=repo_root, target=target, author=author, settings=settings, json_path=args.json)
    finally:
        if temp_dir is not None and not args.keep_clone:
            cleanup_temp_dir(temp_dir)


def _analyze(*, repo_root: Path, target: str, author: str, settings: Settings, json_path: Path | None) -> int:
    if author:
        print(f"Analyzing contributions by user: {author}")

    policy = compile_exclusion_policy(repo_root, ignore_file=settings.ignore_file, extra_patterns=settings.exclude_patterns)
    if policy.note:
        print(f"Note: {policy.note}")
    if policy.ignore_rules:
        print(f"Loaded {len(policy.ignore_rules)} patterns from {settings.ignore_file}")

    files = discover_files(repo_root, policy)
    print(f"Found {len(files)} files to analyze...")
    if not files:
        print("Warning: No files found to analyze!")
        return 0

    print("")
    tally, errors = analyze_files(
        files,
        repo_root,
        jobs=settings.jobs,
        author=author,
        on_progress=Progress(len(files)),
    )
    if errors:
        print(f"Note: git blame failed for {len(errors)} files; they count as zero lines.")
    print("")

    if isinstance(tally, FileTally):
        print(render_user(tally, top_n=settings.top_n))
    else:
        print(render_general(tally, top_n=settings.top_n))

    if json_path is not None:
        write_json(json_path, tally_to_json(tally, target=target))
        print(f"Wrote {json_path}")
    return 0

