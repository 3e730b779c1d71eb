from __future__ import annotations

from collections import Counter
from typing import Iterable

from .models import AuthorTally, BlameResult, FileTally


def count_authors(authors: Iterable[str]) -> dict[str, int]:
    counts: Counter[str] = Counter()
    for a in authors:
        if not a.strip():
            continue
        counts[a] += 1
    return dict(counts)


def merge_counts(dst: dict[str, int], src: dict[str, int]) -> None:
    for key, n in src.items():
        dst[key] = int(dst.get(key, 0)) + int(n)


def aggregate_authors(records: Iterable[Iterable[str] | BlameResult], *, files_processed: int | None = None) -> AuthorTally:
    """
    Fold per-file author sequences into lines-per-author. Whitespace-only names are
    dropped from `counts` but still count towards `total_lines`; names are otherwise
    compared exactly. Failed blames contribute nothing. `files_processed` defaults
    to the number of records.
    """
    counts: dict[str, int] = {}
    n_records = 0
    n_lines = 0
    for rec in records:
        n_records += 1
        authors = list(rec.authors if isinstance(rec, BlameResult) else rec)
        n_lines += len(authors)
        merge_counts(counts, count_authors(authors))
    return AuthorTally(
        counts=counts,
        files_processed=n_records if files_processed is None else files_processed,
        total_lines=n_lines,
    )


def aggregate_user_files(author: str, pairs: Iterable[tuple[str, int]], *, files_processed: int | None = None) -> FileTally:
    """Keep (path, count) pairs with count > 0; files without matching lines are omitted."""
    counts: dict[str, int] = {}
    n_pairs = 0
    for path, n in pairs:
        n_pairs += 1
        if int(n) > 0:
            counts[path] = counts.get(path, 0) + int(n)
    return FileTally(author=author, counts=counts, files_processed=n_pairs if files_processed is None else files_processed)


def ranked(counts: dict[str, int]) -> list[tuple[str, int]]:
    """Count descending, then key ascending."""
    return sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
