"""Parser for compiler diagnostics in ``swift build`` style logs."""

from __future__ import annotations

import re
from pathlib import PurePath
from typing import List, Optional

from ..models import Severity, severity_from_code
from .results import CommandKind, IssueType, PackageAnalysis, PackageIssue

_LOCATED = re.compile(
    r"^(?P<file>[^:\s][^:]*):(?P<line>\d+):(?:(?P<column>\d+):)?\s*(?P<level>error|warning|note):\s*(?P<message>.+)$"
)
_BARE = re.compile(r"^(?P<level>error|warning):\s*(?P<message>.+)$")

_LEVELS = {"error": "error", "warning": "warning", "note": "info"}


def _severity(level: str) -> Severity:
    return severity_from_code(_LEVELS.get(level, level))


class BuildLogParser:
    """Collects ``file:line:col: level: message`` diagnostics, de-duplicated."""

    def parse(self, text: str, target_filter: Optional[str] = None) -> PackageAnalysis:
        issues: List[PackageIssue] = []
        seen: set[tuple] = set()

        for line in text.splitlines():
            trimmed = line.strip()
            located = _LOCATED.match(trimmed)
            if located is not None:
                path = PurePath(located.group("file"))
                if target_filter is not None and target_filter not in path.parts:
                    continue
                file_name = path.name
                line_number = int(located.group("line"))
                key = (file_name, line_number, located.group("level"), located.group("message"))
                if key in seen:
                    continue
                seen.add(key)
                issues.append(
                    PackageIssue(
                        type=IssueType.COMPILATION,
                        severity=_severity(located.group("level")),
                        message=located.group("message").strip(),
                        file=file_name,
                        line=line_number,
                    )
                )
                continue

            bare = _BARE.match(trimmed)
            if bare is not None:
                key = (None, None, bare.group("level"), bare.group("message"))
                if key in seen:
                    continue
                seen.add(key)
                issues.append(
                    PackageIssue(
                        type=IssueType.UNKNOWN,
                        severity=_severity(bare.group("level")),
                        message=bare.group("message").strip(),
                    )
                )

        result = PackageAnalysis(command=CommandKind.BUILD, success=True, issues=issues)
        result.success = result.error_count == 0
        return result
