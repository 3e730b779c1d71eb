from __future__ import annotations

import argparse
import dataclasses
import json
from pathlib import Path

from .analysis_paths import DEFAULT_IGNORE_FILE
from .analysis_pool import DEFAULT_CONCURRENCY

DEFAULT_CONFIG_PATH = Path("git-authorship.json")
DEFAULT_TOP_N = 20


def load_config(config_path: Path) -> dict:
    if not config_path.exists():
        return {}
    data = json.loads(config_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{config_path}: expected a JSON object, got {type(data).__name__}")
    return data


@dataclasses.dataclass(frozen=True)
class Settings:
    jobs: int = DEFAULT_CONCURRENCY
    top_n: int = DEFAULT_TOP_N
    ignore_file: str = DEFAULT_IGNORE_FILE
    exclude_patterns: tuple[str, ...] = ()


def _positive_int(value: object, key: str) -> int:
    try:
        n = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ValueError(f"`{key}` must be an integer, got {value!r}") from None
    if n < 1:
        raise ValueError(f"`{key}` must be >= 1, got {n}")
    return n


def resolve_settings(config: dict, args: argparse.Namespace | None = None) -> Settings:
    """Config file values, overridden by any command-line flags that were given."""
    jobs = _positive_int(config.get("jobs", DEFAULT_CONCURRENCY), "jobs")
    top_n = _positive_int(config.get("top_n", DEFAULT_TOP_N), "top_n")
    ignore_file = str(config.get("ignore_file", DEFAULT_IGNORE_FILE) or DEFAULT_IGNORE_FILE).strip()
    exclude_patterns = [str(p).strip() for p in (config.get("exclude_patterns") or []) if str(p).strip()]

    if args is not None:
        if getattr(args, "jobs", None):
            jobs = _positive_int(args.jobs, "--jobs")
        if getattr(args, "top", None):
            top_n = _positive_int(args.top, "--top")
        for p in getattr(args, "exclude", None) or []:
            if str(p).strip():
                exclude_patterns.append(str(p).strip())

    return Settings(
        jobs=jobs,
        top_n=top_n,
        ignore_file=ignore_file,
        exclude_patterns=tuple(exclude_patterns),
    )
