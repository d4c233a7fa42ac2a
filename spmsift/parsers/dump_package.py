"""Parser for ``swift package dump-package`` JSON."""

from __future__ import annotations

import json
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from ..models import Severity
from .results import (
    CommandKind,
    DependencyAnalysis,
    ExternalDependency,
    IssueType,
    PackageAnalysis,
    PackageIssue,
    TargetAnalysis,
    TargetInfo,
)

MANY_TARGETS = 20


def _dependency_name(entry: Any) -> Optional[str]:
    # Real dumps use {"byName": ["X", null]} / {"product": ["X", "pkg", ...]}.
    if isinstance(entry, str):
        return entry
    if isinstance(entry, Mapping):
        for value in entry.values():
            if isinstance(value, list) and value and isinstance(value[0], str):
                return value[0]
    return None


def _parse_target(raw: Mapping[str, Any]) -> Optional[TargetInfo]:
    name = raw.get("name")
    if not isinstance(name, str):
        return None
    target_type = raw.get("type")
    dependencies = [
        dep for dep in (_dependency_name(entry) for entry in raw.get("dependencies") or []) if dep
    ]
    return TargetInfo(
        name=name,
        type=target_type if isinstance(target_type, str) else "regular",
        dependencies=dependencies,
    )


def _format_requirement(requirement: Any) -> Optional[str]:
    if not isinstance(requirement, Mapping):
        return None
    for key in ("range", "exact"):
        values = requirement.get(key)
        if isinstance(values, list) and values:
            parts: List[str] = []
            for value in values:
                if isinstance(value, Mapping):
                    lower = value.get("lowerBound")
                    upper = value.get("upperBound")
                    parts.append(f"{lower}..<{upper}" if upper else str(lower))
                else:
                    parts.append(str(value))
            return ", ".join(parts)
    for key in ("branch", "revision"):
        values = requirement.get(key)
        if isinstance(values, list) and values:
            return f"{key}: {values[0]}"
    return None


def _parse_dependency(raw: Mapping[str, Any]) -> Tuple[Optional[ExternalDependency], Optional[str]]:
    """Return (external, local_name); exactly one side is set for a valid entry."""
    if "sourceControl" in raw or "fileSystem" in raw:
        # swift 5.6+ layout
        for entry in raw.get("sourceControl") or []:
            if not isinstance(entry, Mapping):
                continue
            remote = ((entry.get("location") or {}).get("remote") or [{}])[0]
            url = remote.get("urlString") if isinstance(remote, Mapping) else remote
            return (
                ExternalDependency(
                    name=str(entry.get("identity", "")),
                    url=url if isinstance(url, str) else None,
                    version=_format_requirement(entry.get("requirement")),
                ),
                None,
            )
        for entry in raw.get("fileSystem") or []:
            if isinstance(entry, Mapping):
                return None, str(entry.get("identity") or entry.get("path") or "")
        return None, None

    name = raw.get("name") or raw.get("identity")
    if not isinstance(name, str):
        return None, None
    if raw.get("url") is None and raw.get("path") is not None:
        return None, name
    url = raw.get("url")
    return (
        ExternalDependency(
            name=name,
            url=url if isinstance(url, str) else None,
            version=_format_requirement(raw.get("requirement")),
        ),
        None,
    )


class DumpPackageParser:
    """Turns dump-package JSON into targets, dependencies and structure issues."""

    def parse(self, text: str, target_filter: Optional[str] = None) -> PackageAnalysis:
        try:
            document = json.loads(text)
        except json.JSONDecodeError as exc:
            return self._invalid(f"Invalid JSON in dump-package output: {exc.msg}")
        if not isinstance(document, Mapping):
            return self._invalid("dump-package output is not a JSON object")

        targets = [
            target
            for target in (
                _parse_target(raw) for raw in document.get("targets") or [] if isinstance(raw, Mapping)
            )
            if target is not None
        ]
        dependencies = self._collect_dependencies(document.get("dependencies") or [])
        issues: List[PackageIssue] = []

        if target_filter is not None:
            selected = [target for target in targets if target.name == target_filter]
            wanted = {dep for target in selected for dep in target.dependencies}
            dependencies = DependencyAnalysis(
                external=[dep for dep in dependencies.external if dep.name in wanted],
                local=[name for name in dependencies.local if name in wanted],
            )
        else:
            selected = targets
            if not targets:
                issues.append(
                    PackageIssue(
                        type=IssueType.MISSING_TARGET,
                        severity=Severity.WARNING,
                        message="No targets found in package",
                    )
                )
            elif len(targets) > MANY_TARGETS:
                issues.append(
                    PackageIssue(
                        type=IssueType.PERFORMANCE,
                        severity=Severity.WARNING,
                        message=f"Package has many targets ({len(targets)})",
                    )
                )

        name = document.get("name")
        return PackageAnalysis(
            command=CommandKind.DUMP_PACKAGE,
            success=True,
            package_name=name if isinstance(name, str) else None,
            targets=TargetAnalysis(count=len(selected), filtered_target=target_filter, targets=selected),
            dependencies=dependencies,
            issues=issues,
        )

    @staticmethod
    def _collect_dependencies(entries: Iterable[Any]) -> DependencyAnalysis:
        analysis = DependencyAnalysis()
        for raw in entries:
            if not isinstance(raw, Mapping):
                continue
            external, local = _parse_dependency(raw)
            if external is not None:
                analysis.external.append(external)
            elif local:
                analysis.local.append(local)
        return analysis

    @staticmethod
    def _invalid(message: str) -> PackageAnalysis:
        return PackageAnalysis(
            command=CommandKind.DUMP_PACKAGE,
            success=False,
            issues=[PackageIssue(type=IssueType.SYNTAX_ERROR, severity=Severity.ERROR, message=message)],
        )
