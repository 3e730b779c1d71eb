from __future__ import annotations

import sys
from typing import TextIO

from .analysis_aggregate import ranked
from .models import AuthorTally, FileTally

BANNER = r"""
+------------------------------------------------------------------------+
|                             git-authorship                              |
+------------------------------------------------------------------------+
""".strip("\n")

RED = "\033[31m"
RESET = "\033[0m"


def fmt_int(n: int) -> str:
    return f"{int(n):,}"


def trunc(s: str, max_len: int) -> str:
    if len(s) <= max_len:
        return s
    if max_len <= 1:
        return s[:max_len]
    return s[: max_len - 1] + "…"


def bar(value: int, max_value: int, width: int = 22) -> str:
    if max_value <= 0:
        filled = 0
    else:
        filled = int(round((value / max_value) * width))
    filled = max(0, min(width, filled))
    return "[" + ("#" * filled) + ("-" * (width - filled)) + "]"


def progress_line(current: int, total: int, width: int = 25) -> str:
    pct = int(round((current / total) * 100)) if total > 0 else 100
    return f"{bar(current, total, width)} {pct}% ({fmt_int(current)}/{fmt_int(total)})"


def print_error(msg: str, stream: TextIO | None = None) -> None:
    out = stream if stream is not None else sys.stderr
    line = f"✗ {msg}"
    if out.isatty():
        line = f"{RED}{line}{RESET}"
    print(line, file=out)


class Progress:
    """Draws (current, total) updates; in place on a TTY, every 10% otherwise."""

    def __init__(self, total: int, stream: TextIO | None = None) -> None:
        self.total = total
        self.stream = stream if stream is not None else sys.stdout
        self.tty = self.stream.isatty()
        self._last_decile = -1

    def __call__(self, current: int, total: int) -> None:
        if self.tty:
            self.stream.write("\r" + progress_line(current, total))
            if current >= total:
                self.stream.write("\n")
            self.stream.flush()
            return
        decile = (current * 10) // total if total > 0 else 10
        if decile != self._last_decile or current >= total:
            self._last_decile = decile
            print(f"Blamed {current}/{total} files...", file=self.stream)


def render_general(tally: AuthorTally, *, top_n: int = 20) -> str:
    lines: list[str] = []
    lines.append("Author contributions by lines")
    lines.append("-" * 72)
    items = ranked(tally.counts)
    if not items:
        lines.append("Warning: no authors found!")
    else:
        max_lines = items[0][1]
        for i, (author, n) in enumerate(items[:top_n], start=1):
            lines.append(f"{i:>4}. {fmt_int(n):>12}  {trunc(author, 32):32} {bar(n, max_lines, 16)}")
        if len(items) > top_n:
            lines.append(f"... and {len(items) - top_n} more authors")
    lines.append("")
    lines.append("Summary")
    lines.append("-" * 72)
    lines.append(f"Total lines analyzed: {fmt_int(tally.total_lines):>12}")
    lines.append(f"Unique authors:       {fmt_int(tally.unique_authors):>12}")
    lines.append(f"Files processed:      {fmt_int(tally.files_processed):>12}")
    return "\n".join(lines) + "\n"


def render_user(tally: FileTally, *, top_n: int = 20) -> str:
    lines: list[str] = []
    lines.append(f"{tally.author}'s contributions by file")
    lines.append("-" * 72)
    items = ranked(tally.counts)
    if not items:
        lines.append(f'Warning: no contributions found for user "{tally.author}"')
    else:
        for path, n in items[:top_n]:
            lines.append(f"{fmt_int(n):>10}  {trunc(path, 58)}")
        if len(items) > top_n:
            lines.append(f"... and {len(items) - top_n} more files")
    lines.append("")
    lines.append("Summary")
    lines.append("-" * 72)
    lines.append(f"Total lines by {tally.author}: {fmt_int(tally.total_lines)}")
    lines.append(f"Files contributed to: {fmt_int(tally.files_contributed)}")
    lines.append(f"Files processed:      {fmt_int(tally.files_processed)}")
    return "\n".join(lines) + "\n"
