from __future__ import annotations

import json
from pathlib import Path

from .analysis_aggregate import ranked
from .models import AuthorTally, FileTally


def write_json(path: Path, data: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, sort_keys=False) + "\n", encoding="utf-8")


def tally_to_json(tally: AuthorTally | FileTally, *, target: str) -> dict[str, object]:
    if isinstance(tally, FileTally):
        return {
            "mode": "author",
            "target": target,
            "author": tally.author,
            "files": [{"path": p, "lines": n} for p, n in ranked(tally.counts)],
            "total_lines": tally.total_lines,
            "files_contributed": tally.files_contributed,
            "files_processed": tally.files_processed,
        }
    return {
        "mode": "general",
        "target": target,
        "authors": [{"author": a, "lines": n} for a, n in ranked(tally.counts)],
        "total_lines": tally.total_lines,
        "unique_authors": tally.unique_authors,
        "files_processed": tally.files_processed,
    }
