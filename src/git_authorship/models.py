from __future__ import annotations

import dataclasses


@dataclasses.dataclass(frozen=True)
class BlameResult:
    path: str
    authors: tuple[str, ...] = ()
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error

    def count(self, author: str) -> int:
        return sum(1 for a in self.authors if a == author)


@dataclasses.dataclass
class AuthorTally:
    counts: dict[str, int] = dataclasses.field(default_factory=dict)  # author -> lines
    files_processed: int = 0
    total_lines: int = 0  # every blamed line, including ones with a blank author name

    @property
    def unique_authors(self) -> int:
        return len(self.counts)


@dataclasses.dataclass
class FileTally:
    author: str
    counts: dict[str, int] = dataclasses.field(default_factory=dict)  # relative path -> lines by author
    files_processed: int = 0

    @property
    def total_lines(self) -> int:
        return sum(self.counts.values())

    @property
    def files_contributed(self) -> int:
        return len(self.counts)
