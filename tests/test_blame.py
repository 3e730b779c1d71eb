from __future__ import annotations

import os
import subprocess
from pathlib import Path

import pytest

from git_authorship.git import blame_file, extract_authors, parse_porcelain_authors


def _porcelain(authors: list[str]) -> str:
    out: list[str] = []
    for i, a in enumerate(authors, start=1):
        out += [
            f"{'a' * 40} {i} {i} 1",
            f"author {a}",
            f"author-mail <{a.lower()}@example.com>",
            "author-time 1735689600",
            "author-tz +0000",
            f"committer {a}",
            "summary init",
            "filename f.txt",
            f"\tauthor line {i} of content",
        ]
    return "\n".join(out) + "\n"


def _fake_git(tmp_path: Path, *, stdout: str, code: int = 0, stderr: str = "") -> Path:
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    (bin_dir / "out.txt").write_text(stdout, encoding="utf-8")
    fake = bin_dir / "git"
    fake.write_text(
        "\n".join(
            [
                "#!/usr/bin/env python3",
                "import pathlib, sys",
                "",
                "def main() -> int:",
                "    if len(sys.argv) > 1 and sys.argv[1] == 'blame':",
                "        sys.stdout.write((pathlib.Path(__file__).parent / 'out.txt').read_text())",
                f"        sys.stderr.write({stderr!r})",
                f"        return {code}",
                "    return 2",
                "",
                "if __name__ == '__main__':",
                "    raise SystemExit(main())",
            ]
        )
        + "\n",
        encoding="utf-8",
    )
    fake.chmod(0o755)
    return bin_dir


def _run(cmd: list[str], *, cwd: Path, env: dict[str, str] | None = None) -> str:
    proc = subprocess.run(cmd, cwd=str(cwd), env=env, check=True, capture_output=True, text=True)
    return proc.stdout


def _commit_as(repo: Path, name: str, message: str) -> None:
    env = os.environ.copy()
    env["GIT_AUTHOR_NAME"] = name
    env["GIT_AUTHOR_EMAIL"] = f"{name.lower().replace(' ', '.')}@example.com"
    env["GIT_AUTHOR_DATE"] = "2025-01-01T00:00:00Z"
    env["GIT_COMMITTER_DATE"] = "2025-01-01T00:00:00Z"
    _run(["git", "add", "-A"], cwd=repo)
    _run(["git", "commit", "-m", message], cwd=repo, env=env)


def _init_repo(repo: Path) -> None:
    repo.mkdir(parents=True, exist_ok=True)
    _run(["git", "init"], cwd=repo)
    _run(["git", "config", "user.name", "Committer"], cwd=repo)
    _run(["git", "config", "user.email", "committer@example.com"], cwd=repo)
    _run(["git", "config", "commit.gpgsign", "false"], cwd=repo)


def test_parse_porcelain_authors_ignores_content_lines() -> None:
    text = _porcelain(["Ann", "Bob"])
    assert parse_porcelain_authors(text.splitlines(keepends=True)) == ["Ann", "Bob"]


def test_parse_porcelain_authors_keeps_names_verbatim() -> None:
    lines = ["author  Spaced Name \n", "author-mail <x@y>\n", "author \n"]
    assert parse_porcelain_authors(lines) == [" Spaced Name ", ""]


def test_extract_authors_filter_and_full_modes(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    repo = tmp_path / "repo"
    repo.mkdir()
    target = repo / "f.txt"
    target.write_text("x\n", encoding="utf-8")
    bin_dir = _fake_git(tmp_path, stdout=_porcelain(["A", "B", "A", "A", "C"]))
    monkeypatch.setenv("PATH", str(bin_dir) + os.pathsep + os.environ.get("PATH", ""))

    assert extract_authors(target, repo, "A") == 3
    assert extract_authors(target, repo, "a") == 0
    assert extract_authors(target, repo) == ["A", "B", "A", "A", "C"]


def test_blame_failure_is_empty_not_fatal(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    repo = tmp_path / "repo"
    repo.mkdir()
    target = repo / "f.txt"
    target.write_text("x\n", encoding="utf-8")
    bin_dir = _fake_git(tmp_path, stdout="", code=128, stderr="fatal: no such path 'f.txt' in HEAD\n")
    monkeypatch.setenv("PATH", str(bin_dir) + os.pathsep + os.environ.get("PATH", ""))

    r = blame_file(target, repo)
    assert r.authors == ()
    assert r.ok is False
    assert "exited 128" in r.error
    assert "no such path" in r.error
    assert extract_authors(target, repo) == []
    assert extract_authors(target, repo, "A") == 0

    errs: list[str] = []
    assert extract_authors(target, repo, errors=errs) == []
    assert len(errs) == 1
    assert errs[0].startswith("f.txt: git blame exited 128")


def test_blame_without_git_executable(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    empty_bin = tmp_path / "empty_bin"
    empty_bin.mkdir()
    monkeypatch.setenv("PATH", str(empty_bin))

    r = blame_file(tmp_path / "f.txt", tmp_path)
    assert r.authors == ()
    assert "failed to start git blame" in r.error


def test_blame_file_real_repo(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    _init_repo(repo)
    (repo / "notes.txt").write_text("first line by ann\nsecond line by ann\n", encoding="utf-8")
    _commit_as(repo, "Ann Example", "ann")
    with (repo / "notes.txt").open("a", encoding="utf-8") as f:
        f.write("third line by bob\n")
    _commit_as(repo, "Bob Example", "bob")

    r = blame_file(repo / "notes.txt", repo)
    assert r.ok, r.error
    assert r.path == "notes.txt"
    assert r.authors == ("Ann Example", "Ann Example", "Bob Example")


def test_blame_untracked_file_counts_as_empty(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    _init_repo(repo)
    (repo / "tracked.txt").write_text("x\n", encoding="utf-8")
    _commit_as(repo, "Ann Example", "init")
    (repo / "untracked.txt").write_text("y\n", encoding="utf-8")

    r = blame_file(repo / "untracked.txt", repo)
    assert r.authors == ()
    assert not r.ok


def test_lone_carriage_return_does_not_split_a_line(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    _init_repo(repo)
    (repo / "cr.txt").write_bytes(b"one\rauthor Mallory\ntwo\n")
    _commit_as(repo, "X", "cr")

    assert extract_authors(repo / "cr.txt", repo) == ["X", "X"]
    assert extract_authors(repo / "cr.txt", repo, "Mallory") == 0
