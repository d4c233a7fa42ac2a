"""Parser for ``swift package show-dependencies`` (JSON or text tree)."""

from __future__ import annotations

import json
import re
from typing import Any, List, Mapping, Optional, Tuple

from ..models import Severity
from .results import (
    CommandKind,
    DependencyAnalysis,
    ExternalDependency,
    IssueType,
    PackageAnalysis,
    PackageIssue,
)

TREE_MARKERS = ("├──", "└──")

# "├── swift-case-paths<https://github.com/pointfreeco/swift-case-paths@1.5.4>"
_TREE_ENTRY = re.compile(r"^(?P<prefix>[│ ]*)[├└]── (?P<name>[^<\s]+)(?:<(?P<url>.+?)(?:@(?P<version>[^@>]+))?>)?")
_TREE_INDENT = 4


def looks_like_tree(text: str) -> bool:
    return any(marker in text for marker in TREE_MARKERS)


class ShowDependenciesParser:
    """Flattens the dependency graph and reports its depth and cycles."""

    def parse(self, text: str, target_filter: Optional[str] = None) -> PackageAnalysis:
        stripped = text.lstrip()
        if stripped.startswith("{"):
            return self._parse_json(stripped)
        return self._parse_tree(text)

    def _parse_json(self, text: str) -> PackageAnalysis:
        try:
            document = json.loads(text)
        except json.JSONDecodeError as exc:
            return PackageAnalysis(
                command=CommandKind.SHOW_DEPENDENCIES,
                success=False,
                issues=[
                    PackageIssue(
                        type=IssueType.SYNTAX_ERROR,
                        severity=Severity.ERROR,
                        message=f"Invalid JSON in show-dependencies output: {exc.msg}",
                    )
                ],
            )

        analysis = DependencyAnalysis()
        seen: dict[str, None] = {}
        root_name = document.get("name") if isinstance(document, Mapping) else None

        def visit(node: Mapping[str, Any], depth: int, ancestors: Tuple[str, ...]) -> None:
            identity = str(node.get("identity") or node.get("name") or "")
            if identity in ancestors:
                analysis.circular_imports = True
                return
            analysis.max_depth = max(analysis.max_depth, depth)
            if identity not in seen:
                seen[identity] = None
                analysis.external.append(
                    ExternalDependency(
                        name=identity,
                        url=node.get("url") if isinstance(node.get("url"), str) else None,
                        version=node.get("version") if isinstance(node.get("version"), str) else None,
                    )
                )
            for child in node.get("dependencies") or []:
                if isinstance(child, Mapping):
                    visit(child, depth + 1, ancestors + (identity,))

        if isinstance(document, Mapping):
            root_identity = str(document.get("identity") or root_name or "")
            for child in document.get("dependencies") or []:
                if isinstance(child, Mapping):
                    visit(child, 1, (root_identity,))

        return self._result(analysis, root_name if isinstance(root_name, str) else None)

    def _parse_tree(self, text: str) -> PackageAnalysis:
        analysis = DependencyAnalysis()
        seen: dict[str, None] = {}
        stack: List[str] = []

        for line in text.splitlines():
            match = _TREE_ENTRY.match(line)
            if match is None:
                continue
            depth = len(match.group("prefix")) // _TREE_INDENT + 1
            name = match.group("name")
            del stack[depth - 1:]
            if name in stack:
                analysis.circular_imports = True
            stack.append(name)
            analysis.max_depth = max(analysis.max_depth, depth)
            if name in seen:
                continue
            seen[name] = None
            analysis.external.append(
                ExternalDependency(name=name, url=match.group("url"), version=match.group("version"))
            )

        return self._result(analysis, None)

    @staticmethod
    def _result(analysis: DependencyAnalysis, package_name: Optional[str]) -> PackageAnalysis:
        issues: List[PackageIssue] = []
        if analysis.circular_imports:
            issues.append(
                PackageIssue(
                    type=IssueType.DEPENDENCY,
                    severity=Severity.ERROR,
                    message="Circular dependency detected in dependency graph",
                )
            )
        return PackageAnalysis(
            command=CommandKind.SHOW_DEPENDENCIES,
            success=not issues,
            package_name=package_name,
            dependencies=analysis,
            issues=issues,
        )

