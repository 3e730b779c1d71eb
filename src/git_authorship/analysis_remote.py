from __future__ import annotations

import atexit
import re
import shutil
import signal
import tempfile
import time
from pathlib import Path

from .git import run_git

_REMOTE_PATTERNS = (
    re.compile(r"^https?://"),
    re.compile(r"^git@"),
    re.compile(r"^ssh://"),
    re.compile(r"^git://"),
    re.compile(r"\.git$"),
)


def is_remote_url(target: str) -> bool:
    return any(p.search(target) for p in _REMOTE_PATTERNS)


def temp_dir_for(repo_url: str, *, base: Path | None = None) -> Path:
    name = repo_url.rstrip("/").rsplit("/", 1)[-1]
    if name.endswith(".git"):
        name = name[:-4]
    name = re.sub(r"[^a-zA-Z0-9\-_]", "_", name) or "repo"
    stamp = int(time.time() * 1000)
    root = base if base is not None else Path(tempfile.gettempdir())
    return root / f"git_authorship_{name}_{stamp}"


def cleanup_temp_dir(path: Path) -> None:
    if not path.exists():
        return
    print(f"Cleaning up temporary directory: {path}")
    try:
        shutil.rmtree(path)
    except OSError as e:
        print(f"Warning: failed to clean up {path}: {e}")


def clone_repository(repo_url: str, *, branch: str = "", tag: str = "", base: Path | None = None) -> Path:
    """
    Clone `repo_url` into a fresh temporary directory and return it.
    A tag is checked out the same way as a branch (`git clone --branch <tag>`).
    Raises RuntimeError on failure, after removing any partial clone.
    """
    dest = temp_dir_for(repo_url, base=base)
    print(f"Cloning repository: {repo_url}")
    print(f"Target directory: {dest}")

    args = ["clone"]
    if branch:
        args += ["--branch", branch]
    if tag:
        args += ["--branch", tag]
    args += [repo_url, str(dest)]

    try:
        code, _out, err = run_git(args, cwd=Path.cwd(), timeout_s=3600)
        if code != 0:
            raise RuntimeError(f"git clone failed: {err.strip()}")
        if not (dest / ".git").exists():
            raise RuntimeError("cloned directory does not contain a git repository")
    except Exception:
        if dest.exists():
            shutil.rmtree(dest, ignore_errors=True)
        raise

    print("Repository cloned successfully")
    if branch:
        print(f"Using branch: {branch}")
    if tag:
        print(f"Using tag: {tag}")
    return dest


def install_cleanup_handlers(path: Path) -> None:
    """Remove `path` at interpreter exit and on SIGINT/SIGTERM."""
    atexit.register(cleanup_temp_dir, path)

    def on_signal(signum: int, frame: object) -> None:
        _ = frame
        print(f"\nReceived signal {signum}, cleaning up...")
        cleanup_temp_dir(path)
        raise SystemExit(130 if signum == signal.SIGINT else 143)

    signal.signal(signal.SIGINT, on_signal)
    signal.signal(signal.SIGTERM, on_signal)
