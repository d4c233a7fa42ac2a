"""Parser for ``swift package describe`` text output."""

from __future__ import annotations

from typing import List, Optional

from ..models import Severity
from .results import (
    CommandKind,
    DependencyAnalysis,
    IssueType,
    PackageAnalysis,
    PackageIssue,
    TargetAnalysis,
)

_NAME_PREFIXES = ("package name:", "name:")


def _value_after(line: str, prefix: str) -> str:
    return line[len(prefix):].strip()


class DescribeParser:
    """Extracts the package name and error lines from describe output.

    Describe output carries no per-target dependency data, so a target
    filter yields an empty result with an explanatory issue.
    """

    def parse(self, text: str, target_filter: Optional[str] = None) -> PackageAnalysis:
        if target_filter is not None:
            return PackageAnalysis(
                command=CommandKind.DESCRIBE,
                success=True,
                targets=TargetAnalysis(count=0, filtered_target=target_filter),
                dependencies=DependencyAnalysis(),
                issues=[
                    PackageIssue(
                        type=IssueType.UNKNOWN,
                        severity=Severity.INFO,
                        target=target_filter,
                        message=(
                            "describe command doesn't support target-specific analysis. "
                            "Use dump-package for target filtering."
                        ),
                    )
                ],
            )

        package_name: Optional[str] = None
        issues: List[PackageIssue] = []
        for line in text.splitlines():
            trimmed = line.strip()
            lowered = trimmed.lower()
            if package_name is None:
                for prefix in _NAME_PREFIXES:
                    if lowered.startswith(prefix):
                        package_name = _value_after(trimmed, prefix) or None
                        break
            if "error" in lowered:
                issues.append(
                    PackageIssue(type=IssueType.SYNTAX_ERROR, severity=Severity.ERROR, message=trimmed)
                )

        return PackageAnalysis(
            command=CommandKind.DESCRIBE,
            success=package_name is not None,
            package_name=package_name,
            issues=issues,
        )
