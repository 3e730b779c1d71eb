from __future__ import annotations

import os
import stat
from pathlib import Path

from .analysis_paths import ExclusionPolicy


def validate_directory(target: Path) -> Path:
    """
    Check that `target` exists, is a directory and is a git repository root.
    Returns the resolved path; raises ValueError with a user-facing message.
    """
    if not target.exists():
        raise ValueError(f'Directory "{target}" does not exist')
    if not target.is_dir():
        raise ValueError(f'"{target}" is not a directory')
    if not (target / ".git").exists():
        raise ValueError(f'"{target}" is not a git repository')
    return target.resolve()


def _is_regular_file(path: Path) -> bool:
    try:
        st = os.stat(path)
    except OSError:
        return False
    return stat.S_ISREG(st.st_mode)


def discover_files(root: Path, policy: ExclusionPolicy) -> list[Path]:
    """
    Walk `root` and return absolute paths of regular files not excluded by `policy`.
    Paths are tested relative to `root`. Entries that vanish or cannot be read are skipped.
    """
    root = root.resolve()
    files: list[Path] = []

    def onerror(err: OSError) -> None:
        _ = err

    for dirpath, dirnames, filenames in os.walk(root, onerror=onerror):
        base = Path(dirpath)
        rel_base = base.relative_to(root).as_posix()
        rel_base = "" if rel_base == "." else rel_base

        kept_dirs: list[str] = []
        for d in dirnames:
            rel = f"{rel_base}/{d}" if rel_base else d
            if policy.excludes_dir(rel):
                continue
            kept_dirs.append(d)
        dirnames[:] = kept_dirs

        for name in filenames:
            rel = f"{rel_base}/{name}" if rel_base else name
            if policy.excludes(rel):
                continue
            full = base / name
            if _is_regular_file(full):
                files.append(full)

    files.sort()
    return files
