from __future__ import annotations

import dataclasses
from pathlib import Path

from wcmatch import glob

# `*` stays within one segment, `**` spans zero or more, dotfiles are not special.
GLOB_FLAGS = glob.GLOBSTAR | glob.DOTMATCH | glob.CASE | glob.FORCEUNIX

# Excluded from every run, before any ignore-file patterns.
BUILTIN_EXCLUDE_PATTERNS: tuple[str, ...] = (
    # lock files
    "**/*-lock.*",
    "**/*.lock",
    # images
    "**/*.gif",
    "**/*.png",
    "**/*.jpg",
    "**/*.jpeg",
    "**/*.webp",
    "**/*.ico",
    "**/*.tiff",
    "**/*.tif",
    "**/*.bmp",
    "**/*.svg",
    # fonts
    "**/*.woff",
    "**/*.woff2",
    "**/*.ttf",
    "**/*.otf",
    "**/*.eot",
    # video / audio
    "**/*.mp4",
    "**/*.avi",
    "**/*.mov",
    "**/*.wmv",
    "**/*.flv",
    "**/*.webm",
    "**/*.mp3",
    "**/*.wav",
    "**/*.flac",
    "**/*.aac",
    "**/*.ogg",
    # archives
    "**/*.zip",
    "**/*.tar",
    "**/*.tgz",
    "**/*.rar",
    "**/*.7z",
    "**/*.gz",
    "**/*.bz2",
    "**/*.xz",
    # binaries / installers
    "**/*.exe",
    "**/*.dll",
    "**/*.so",
    "**/*.dylib",
    "**/*.bin",
    "**/*.deb",
    "**/*.rpm",
    "**/*.dmg",
    "**/*.pkg",
    "**/*.msi",
    # databases
    "**/*.db",
    "**/*.sqlite",
    "**/*.sqlite3",
    "**/*.mdb",
    # office documents
    "**/*.pdf",
    "**/*.doc",
    "**/*.docx",
    "**/*.xls",
    "**/*.xlsx",
    "**/*.ppt",
    "**/*.pptx",
    # build artifacts
    "**/*.o",
    "**/*.obj",
    "**/*.class",
    "**/*.pyc",
    "**/*.pyo",
    "**/*.pyd",
    "**/*.a",
    "**/*.lib",
    "**/*.jar",
    "**/*.war",
    "**/*.ear",
    # minified
    "**/*.min.js",
    "**/*.min.css",
    "**/*.min.html",
    # OS metadata
    "**/.DS_Store",
    "**/Thumbs.db",
    "**/desktop.ini",
    "**/.directory",
    # editors
    "**/.vscode/**",
    "**/.zed/**",
    "**/.idea/**",
    "**/.vs/**",
    "**/nbproject/**",
    "**/*.swp",
    "**/*.swo",
    "**/*~",
    # dependencies
    "**/node_modules/**",
    "**/vendor/**",
    "**/bower_components/**",
    "**/.npm/**",
    "**/.yarn/**",
    # caches
    "**/.cache/**",
    "**/.tmp/**",
    "**/.temp/**",
    "**/__pycache__/**",
    "**/.pytest_cache/**",
    "**/coverage/**",
    "**/.nyc_output/**",
    # version control
    "**/.git/**",
    "**/.hg/**",
    "**/.svn/**",
    # logs
    "**/*.log",
    "**/*.logs",
    "**/logs/**",
    # certificates and keys
    "**/*.pem",
    "**/*.key",
    "**/*.p12",
    "**/*.pfx",
    "**/*.crt",
    "**/*.cer",
    # backups
    "**/*.bak",
    "**/*.backup",
    "**/*.orig",
)

DEFAULT_IGNORE_FILE = ".gitignore"


def translate_ignore_rule(line: str) -> str | None:
    """
    Turn one ignore-file line into a glob pattern, or None when the line
    contributes nothing:
      - blank lines and `#` comments are dropped
      - `!negations` are dropped (not inverted)
      - `dir/` becomes `dir/**`
      - a rule without `/` matches at any depth: `name` -> `**/name`
      - a leading `/` is stripped
    """
    rule = line.strip()
    if not rule or rule.startswith("#"):
        return None
    if rule.startswith("!"):
        return None
    if rule.endswith("/"):
        rule = rule[:-1] + "/**"
    if not rule.startswith("/") and "/" not in rule:
        rule = "**/" + rule
    if rule.startswith("/"):
        rule = rule[1:]
    return rule


def read_ignore_rules(path: Path) -> tuple[list[str], str]:
    """Returns (translated patterns, diagnostic note). A missing file is not an error."""
    if not path.exists():
        return [], ""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return [], f"Could not read {path.name} ({e})"

    patterns: list[str] = []
    for raw_line in text.splitlines():
        pattern = translate_ignore_rule(raw_line)
        if pattern is not None:
            patterns.append(pattern)
    return patterns, ""


def normalize_rel_path(path: str) -> str:
    p = path.replace("\\", "/")
    while p.startswith("./"):
        p = p[2:]
    return p


@dataclasses.dataclass(frozen=True)
class ExclusionPolicy:
    builtin: tuple[str, ...] = BUILTIN_EXCLUDE_PATTERNS
    ignore_rules: tuple[str, ...] = ()
    extra: tuple[str, ...] = ()
    note: str = ""

    @property
    def patterns(self) -> tuple[str, ...]:
        return (*self.builtin, *self.ignore_rules, *self.extra)

    def excludes(self, rel_path: str) -> bool:
        """True when any pattern matches `rel_path` (relative to the scan root, `/`-separated)."""
        p = normalize_rel_path(rel_path)
        if not p:
            return False
        return glob.globmatch(p, list(self.patterns), flags=GLOB_FLAGS)

    def excludes_dir(self, rel_dir: str) -> bool:
        """
        True when every entry under `rel_dir` would be excluded, i.e. some `<prefix>/**`
        pattern has a prefix matching the directory itself.
        """
        p = normalize_rel_path(rel_dir).rstrip("/")
        if not p:
            return False
        prefixes = [pat[:-3] or "**" for pat in self.patterns if pat == "**" or pat.endswith("/**")]
        if not prefixes:
            return False
        return glob.globmatch(p, prefixes, flags=GLOB_FLAGS)


def compile_exclusion_policy(
    root: Path,
    *,
    ignore_file: str = DEFAULT_IGNORE_FILE,
    extra_patterns: list[str] | tuple[str, ...] = (),
) -> ExclusionPolicy:
    rules, note = read_ignore_rules(root / ignore_file)
    notes = [note] if note else []

    extra: list[str] = []
    skipped: list[str] = []
    for raw in extra_patterns:
        p = (raw or "").strip()
        if not p:
            continue
        if p.startswith("!"):
            skipped.append(p)
            continue
        extra.append(p)
    if skipped:
        notes.append(f"Ignoring negated exclude patterns (exclusions cannot be overridden): {', '.join(skipped)}")

    return ExclusionPolicy(
        builtin=BUILTIN_EXCLUDE_PATTERNS,
        ignore_rules=tuple(rules),
        extra=tuple(extra),
        note="; ".join(notes),
    )
