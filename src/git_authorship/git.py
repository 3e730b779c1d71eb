from __future__ import annotations

import io
import os
import subprocess
import threading
from pathlib import Path

from .models import BlameResult

BLAME_ARGS = ["blame", "-M", "-C", "-w", "--line-porcelain"]
AUTHOR_PREFIX = "author "


def run_git(args: list[str], cwd: Path, timeout_s: int = 300) -> tuple[int, str, str]:
    proc = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        capture_output=True,
        text=True,
        timeout=timeout_s,
    )
    return proc.returncode, proc.stdout, proc.stderr


def parse_porcelain_authors(lines) -> list[str]:
    """
    Pull the author name out of `--line-porcelain` output, one per source line.
    Content lines are tab-prefixed, so only header lines can start with `author `.
    """
    authors: list[str] = []
    for raw_line in lines:
        line = raw_line.rstrip("\n")
        if line.startswith(AUTHOR_PREFIX):
            authors.append(line[len(AUTHOR_PREFIX) :])
    return authors


def repo_rel_path(path: Path, repo_root: Path) -> str:
    return Path(os.path.relpath(path, repo_root)).as_posix()


def blame_file(path: Path, repo_root: Path) -> BlameResult:
    """
    Run `git blame -M -C -w --line-porcelain` for one file and collect its authors.
    Any failure yields an empty author list with `error` set; it never raises.
    """
    try:
        rel = repo_rel_path(path, repo_root)
    except ValueError as e:
        return BlameResult(path=str(path), error=f"path outside repo: {e}")

    try:
        proc = subprocess.Popen(
            ["git", *BLAME_ARGS, "--", rel],
            cwd=str(repo_root),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as e:
        return BlameResult(path=rel, error=f"failed to start git blame: {e}")

    stderr_chunks: list[bytes] = []
    stderr_bytes = 0
    max_stderr_bytes = 10_000

    def drain_stderr() -> None:
        nonlocal stderr_bytes
        if proc.stderr is None:
            return
        while True:
            chunk = proc.stderr.read(8192)
            if not chunk:
                return
            if stderr_bytes >= max_stderr_bytes:
                continue
            take = chunk[: max_stderr_bytes - stderr_bytes]
            stderr_chunks.append(take)
            stderr_bytes += len(take)

    stderr_thread = threading.Thread(target=drain_stderr, daemon=True)
    stderr_thread.start()

    assert proc.stdout is not None
    # Split on "\n" only; a lone "\r" inside file content must not start a new line.
    stdout = io.TextIOWrapper(proc.stdout, encoding="utf-8", errors="replace", newline="\n")
    authors = parse_porcelain_authors(stdout)

    code = proc.wait()
    stderr_thread.join()
    if code != 0:
        stderr = b"".join(stderr_chunks).decode("utf-8", errors="replace")
        return BlameResult(path=rel, error=f"git blame exited {code}: {stderr.strip()[:500]}")

    return BlameResult(path=rel, authors=tuple(authors))


def extract_authors(
    path: Path,
    repo_root: Path,
    author: str | None = None,
    *,
    errors: list[str] | None = None,
) -> list[str] | int:
    """
    Per-line authors of `path`, in line order. With `author`, the number of lines
    whose author equals it exactly. Failed blames count as empty files; their
    reason is appended to `errors` when a list is given.
    """
    result = blame_file(path, repo_root)
    if not result.ok and errors is not None:
        errors.append(f"{result.path}: {result.error}")
    if author:
        return result.count(author)
    return list(result.authors)
