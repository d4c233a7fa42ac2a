"""Swift source discovery for package trees."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence

SWIFT_SUFFIX = ".swift"

_EXCLUDED_DIRS = {
    ".build",
    ".swiftpm",
    "DerivedData",
    "Pods",
    "Carthage",
}


@dataclass
class IgnoreRule:
    """An exclusion pattern from ``exclude_paths`` in .spmsift.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            return self.directory_only and rel_path.startswith(f"{self.pattern}/")

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_ignore_rules(patterns: Sequence[str]) -> List[IgnoreRule]:
    rules: List[IgnoreRule] = []
    for raw in patterns:
        pattern = raw.strip()
        if not pattern:
            continue
        directory_only = pattern.endswith("/")
        if directory_only:
            pattern = pattern[:-1]
        anchored = pattern.startswith("/")
        if anchored:
            pattern = pattern[1:]
        rules.append(
            IgnoreRule(
                pattern=pattern,
                directory_only=directory_only,
                anchored=anchored,
                has_slash="/" in pattern,
            )
        )
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    return any(rule.matches(rel_path, is_dir) for rule in rules)


def _iter_swift_files(root: Path, rules: Sequence[IgnoreRule]) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        kept = []
        for name in sorted(dirnames):
            if name.startswith(".") or name in _EXCLUDED_DIRS:
                continue
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if _should_ignore(rel_path, True, rules):
                continue
            kept.append(name)
        dirnames[:] = kept

        for filename in sorted(filenames):
            if filename.startswith(".") or not filename.endswith(SWIFT_SUFFIX):
                continue
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if _should_ignore(rel_path, False, rules):
                continue
            yield current_dir / filename


def find_swift_files(root: Path, exclude_paths: Sequence[str] = ()) -> List[Path]:
    """Return every ``.swift`` file under ``root`` (hidden entries skipped).

    A path that is itself a Swift file is returned as a one-element list.
    """
    root = Path(root)
    if root.is_file():
        return [root] if root.suffix == SWIFT_SUFFIX else []
    if not root.is_dir():
        return []
    return list(_iter_swift_files(root, build_ignore_rules(exclude_paths)))


def read_text(path: Path) -> str | None:
    """Read a source file, returning None when it cannot be decoded or read."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None


__all__ = ["IgnoreRule", "build_ignore_rules", "find_swift_files", "read_text"]
