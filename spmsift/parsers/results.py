"""Structured results produced by the SPM output parsers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..models import Severity


class CommandKind(str, Enum):
    DUMP_PACKAGE = "dump-package"
    DESCRIBE = "describe"
    SHOW_DEPENDENCIES = "show-dependencies"
    RESOLVED = "resolved"
    BUILD = "build"


class IssueType(str, Enum):
    SYNTAX_ERROR = "syntax_error"
    MISSING_TARGET = "missing_target"
    DEPENDENCY = "dependency"
    PERFORMANCE = "performance"
    COMPILATION = "compilation"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class PackageIssue:
    type: IssueType
    severity: Severity
    message: str
    target: Optional[str] = None
    file: Optional[str] = None
    line: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "type": self.type.value,
            "severity": self.severity.value,
            "message": self.message,
        }
        if self.target is not None:
            payload["target"] = self.target
        if self.file is not None:
            payload["file"] = self.file
        if self.line is not None:
            payload["line"] = self.line
        return payload


@dataclass(frozen=True)
class TargetInfo:
    name: str
    type: str
    dependencies: List[str] = field(default_factory=list)


@dataclass
class TargetAnalysis:
    count: int = 0
    filtered_target: Optional[str] = None
    targets: List[TargetInfo] = field(default_factory=list)

    @property
    def executables(self) -> List[str]:
        return [target.name for target in self.targets if target.type == "executable"]

    @property
    def has_test_targets(self) -> bool:
        return any(target.type == "test" for target in self.targets)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "filtered_target": self.filtered_target,
            "executables": self.executables,
            "has_test_targets": self.has_test_targets,
            "targets": [
                {"name": target.name, "type": target.type, "dependencies": list(target.dependencies)}
                for target in self.targets
            ],
        }


@dataclass(frozen=True)
class ExternalDependency:
    name: str
    url: Optional[str] = None
    version: Optional[str] = None


@dataclass
class DependencyAnalysis:
    external: List[ExternalDependency] = field(default_factory=list)
    local: List[str] = field(default_factory=list)
    circular_imports: bool = False
    max_depth: int = 0

    @property
    def count(self) -> int:
        return len(self.external) + len(self.local)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "external": [
                {"name": dep.name, "url": dep.url, "version": dep.version} for dep in self.external
            ],
            "local": list(self.local),
            "circular_imports": self.circular_imports,
            "max_depth": self.max_depth,
        }


@dataclass
class PackageAnalysis:
    """Parsed view of one ``swift package`` command output."""

    command: CommandKind
    success: bool
    package_name: Optional[str] = None
    targets: Optional[TargetAnalysis] = None
    dependencies: Optional[DependencyAnalysis] = None
    issues: List[PackageIssue] = field(default_factory=list)
    parse_time: float = 0.0
    raw: Optional[str] = None

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity.at_least(Severity.ERROR))

    @property
    def warning_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity is Severity.WARNING)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "command": self.command.value,
            "success": self.success,
            "package_name": self.package_name,
            "targets": self.targets.to_dict() if self.targets is not None else None,
            "dependencies": self.dependencies.to_dict() if self.dependencies is not None else None,
            "issues": [issue.to_dict() for issue in self.issues],
            "metrics": {"parse_time": round(self.parse_time, 4)},
        }
        if self.raw is not None:
            payload["raw"] = self.raw
        return payload
