"""Core data models shared across spmsift components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence


class Severity(str, Enum):
    """Closed set of diagnostic severities, ordered by rank."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    def at_least(self, other: "Severity") -> bool:
        return self.rank >= other.rank


_SEVERITY_RANK = {
    Severity.INFO: 1,
    Severity.WARNING: 2,
    Severity.ERROR: 3,
    Severity.CRITICAL: 4,
}

_SEVERITY_CODES = {
    "critical": Severity.CRITICAL,
    "high": Severity.ERROR,
    "error": Severity.ERROR,
    "medium": Severity.WARNING,
    "warning": Severity.WARNING,
    "low": Severity.INFO,
    "info": Severity.INFO,
}


def severity_from_code(code: object) -> Severity:
    """Map any external severity code to exactly one Severity.

    Unrecognized codes (including ``None``) are treated as informational.
    """
    if isinstance(code, Severity):
        return code
    if not isinstance(code, str):
        return Severity.INFO
    return _SEVERITY_CODES.get(code.strip().lower(), Severity.INFO)


class Category(str, Enum):
    """Diagnostic categories."""

    CONFIGURATION = "configuration"
    DEPENDENCY = "dependency"
    COMPILATION = "compilation"
    PERFORMANCE = "performance"
    UNKNOWN = "unknown"


def category_from_code(code: object) -> Category:
    if isinstance(code, Category):
        return code
    if isinstance(code, str):
        try:
            return Category(code.strip().lower())
        except ValueError:
            return Category.UNKNOWN
    return Category.UNKNOWN


@dataclass(frozen=True)
class Location:
    """Source position of a diagnostic (file name plus optional 1-based line)."""

    file: str
    line: Optional[int] = None

    def __str__(self) -> str:
        if self.line is None:
            return self.file
        return f"{self.file}:{self.line}"

    @classmethod
    def parse(cls, value: str) -> "Location":
        head, sep, tail = value.rpartition(":")
        if sep and tail.isdigit():
            return cls(file=head, line=int(tail))
        return cls(file=value)


@dataclass(frozen=True)
class Diagnostic:
    """A single finding reported to the user."""

    severity: Severity
    category: Category
    message: str
    location: Optional[Location] = None
    suggestion: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.value,
            "category": self.category.value,
            "message": self.message,
            "location": str(self.location) if self.location is not None else None,
            "suggestion": self.suggestion,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Diagnostic":
        location = payload.get("location")
        suggestion = payload.get("suggestion")
        return cls(
            severity=severity_from_code(payload.get("severity")),
            category=category_from_code(payload.get("category")),
            message=str(payload.get("message", "")),
            location=Location.parse(location) if isinstance(location, str) and location else None,
            suggestion=suggestion if isinstance(suggestion, str) else None,
        )


def has_errors(diagnostics: Sequence[Diagnostic]) -> bool:
    """Return True when any diagnostic is error severity or worse."""
    return any(item.severity.at_least(Severity.ERROR) for item in diagnostics)


class PinForm(str, Enum):
    """How a Package.resolved pin is anchored."""

    BRANCH = "branch"
    REVISION_ONLY = "revision_only"
    VERSION_PINNED = "version_pinned"


@dataclass(frozen=True)
class DependencyPin:
    """One pin entry from a Package.resolved document."""

    identity: str
    form: PinForm
    branch: Optional[str] = None

    @property
    def flagged(self) -> bool:
        return self.form is not PinForm.VERSION_PINNED

    @property
    def display_name(self) -> str:
        if self.form is PinForm.REVISION_ONLY:
            return f"{self.identity} (revision-only)"
        return self.identity


@dataclass(frozen=True)
class ResolvedSummary:
    """Aggregate pin counts for one or more Package.resolved files."""

    total: int = 0
    flagged: int = 0
    flagged_identities: tuple[str, ...] = ()

    def __add__(self, other: "ResolvedSummary") -> "ResolvedSummary":
        return ResolvedSummary(
            total=self.total + other.total,
            flagged=self.flagged + other.flagged,
            flagged_identities=self.flagged_identities + other.flagged_identities,
        )

    def unique_identities(self) -> List[str]:
        return list(dict.fromkeys(self.flagged_identities))


@dataclass(frozen=True)
class CompositionComplexityResult:
    """Measurements for a single composition block."""

    nesting_level: int = 0
    implicit_composition_count: int = 0
    conditional_branch_count: int = 0
    reducer_component_count: int = 0

    @property
    def complexity_score(self) -> int:
        return self.conditional_branch_count + 2 * self.reducer_component_count


@dataclass(frozen=True)
class ReadingRoute:
    """Documentation route selected for a task description."""

    category: str
    description: str
    primary_doc: str
    sections: str
    time_budget: str
    fallback_doc: Optional[str]
    match_score: int


@dataclass(frozen=True)
class CommandResult:
    """Captured result of one toolchain invocation."""

    success: bool
    output: str
    error: Optional[str] = None
    duration: float = 0.0


@dataclass
class PhaseResult:
    """Status of one step in the analyze pipeline."""

    name: str
    status: str
    duration: float = 0.0


@dataclass
class AnalysisReport:
    """Structured result of ``spmsift analyze``."""

    package_path: str
    status: str
    phases: List[PhaseResult] = field(default_factory=list)
    target_count: int = 0
    diagnostics: List[Diagnostic] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "package_path": self.package_path,
            "status": self.status,
            "phases": [
                {"name": phase.name, "status": phase.status, "duration": round(phase.duration, 3)}
                for phase in self.phases
            ],
            "target_count": self.target_count,
            "diagnostics": [item.to_dict() for item in self.diagnostics],
            "recommendations": list(self.recommendations),
        }
