"""Package.resolved analysis: branch and revision-only pins."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..logging import get_logger
from ..models import (
    Category,
    DependencyPin,
    Diagnostic,
    PinForm,
    ResolvedSummary,
    Severity,
)
from .base import Analyzer, PackageContext

RESOLVED_CANDIDATES: Sequence[str] = (
    "Package.resolved",
    ".build/Package.resolved",
    "project.xcworkspace/xcshareddata/swiftpm/Package.resolved",
    "*/project.xcworkspace/xcshareddata/swiftpm/Package.resolved",
)

_logger = get_logger("analyzers.resolved")


def classify_pin(pin: Mapping[str, Any]) -> Optional[DependencyPin]:
    """Classify one pin record; returns None when it has no usable identity."""
    identity = pin.get("identity") or pin.get("package")
    if not isinstance(identity, str) or not identity:
        identity = "<unknown>"

    state = pin.get("state")
    if not isinstance(state, Mapping):
        return DependencyPin(identity=identity, form=PinForm.VERSION_PINNED)

    branch = state.get("branch")
    if isinstance(branch, str):
        return DependencyPin(identity=identity, form=PinForm.BRANCH, branch=branch)

    revision = state.get("revision")
    version = state.get("version")
    if isinstance(revision, str) and branch is None and version is None:
        return DependencyPin(identity=identity, form=PinForm.REVISION_ONLY)

    return DependencyPin(identity=identity, form=PinForm.VERSION_PINNED)


def _extract_pins(document: Any) -> List[Mapping[str, Any]]:
    if not isinstance(document, Mapping):
        return []
    pins = document.get("pins")
    if pins is None and isinstance(document.get("object"), Mapping):
        # version 1 layout
        pins = document["object"].get("pins")
    if not isinstance(pins, list):
        return []
    return [pin for pin in pins if isinstance(pin, Mapping)]


def analyze_resolved_text(text: str) -> ResolvedSummary:
    """Count pins and flag branch / revision-only ones.

    Malformed documents yield an empty summary rather than an error.
    """
    try:
        document = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return ResolvedSummary()

    total = 0
    flagged = 0
    names: List[str] = []
    for raw_pin in _extract_pins(document):
        total += 1
        pin = classify_pin(raw_pin)
        if pin is not None and pin.flagged:
            flagged += 1
            names.append(pin.display_name)
    return ResolvedSummary(total=total, flagged=flagged, flagged_identities=tuple(names))


def analyze_resolved_file(path: Path) -> ResolvedSummary:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        _logger.debug("Cannot read %s: %s", path, exc)
        return ResolvedSummary()
    return analyze_resolved_text(text)


def find_resolved_files(root: Path) -> List[Path]:
    """Return every existing Package.resolved candidate under ``root``."""
    found: List[Path] = []
    for candidate in RESOLVED_CANDIDATES:
        if "*" in candidate:
            found.extend(path for path in sorted(root.glob(candidate)) if path.is_file())
        else:
            path = root / candidate
            if path.is_file():
                found.append(path)
    return found


def collect_resolved(root: Path) -> Tuple[ResolvedSummary, List[Path]]:
    files = find_resolved_files(root)
    summary = ResolvedSummary()
    for path in files:
        summary = summary + analyze_resolved_file(path)
    return summary, files


def resolved_diagnostics(
    summary: ResolvedSummary, *, found: bool, flag_branches: bool
) -> List[Diagnostic]:
    if not found:
        return [
            Diagnostic(
                severity=Severity.INFO,
                category=Category.DEPENDENCY,
                message="No Package.resolved found",
                suggestion="Run 'swift package resolve' to generate resolved dependencies",
            )
        ]

    if summary.flagged <= 0:
        return [
            Diagnostic(
                severity=Severity.INFO,
                category=Category.DEPENDENCY,
                message="All dependencies are properly versioned",
            )
        ]

    if not flag_branches:
        return [
            Diagnostic(
                severity=Severity.INFO,
                category=Category.DEPENDENCY,
                message=f"Found {summary.flagged} branch dependencies",
                suggestion="Use --flag-branch-deps to flag these as anti-patterns",
            )
        ]

    diagnostics = [
        Diagnostic(
            severity=Severity.WARNING,
            category=Category.DEPENDENCY,
            message=f"Found {summary.flagged} branch dependencies (anti-pattern)",
            suggestion="Pin all dependencies to specific versions or exact revisions",
        )
    ]
    for identity in summary.unique_identities():
        diagnostics.append(
            Diagnostic(
                severity=Severity.INFO,
                category=Category.DEPENDENCY,
                message=f"Branch dependency: {identity}",
                suggestion="Replace 'branch: \"main\"' with specific version or revision",
            )
        )
    return diagnostics


class ResolvedAnalyzer(Analyzer):
    """Flags dependencies that track a moving branch."""

    name = "resolved"

    def supports(self, context: PackageContext) -> bool:
        return context.root.is_dir()

    def analyze(self, context: PackageContext) -> Iterable[Diagnostic]:
        summary, files = collect_resolved(context.root)
        if files:
            _logger.info(
                "Package.resolved: %d dependencies, %d branch dependencies",
                summary.total,
                summary.flagged,
            )
            if summary.flagged:
                _logger.info("Branch dependency packages: %s", ", ".join(summary.unique_identities()))
        return resolved_diagnostics(
            summary, found=bool(files), flag_branches=context.flag_branch_deps
        )
