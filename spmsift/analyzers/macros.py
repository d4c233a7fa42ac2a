"""Macro framework detection and comparative build diagnostics.

Frameworks are detected from the manifest text. When any are present the
package is built twice (see :class:`~spmsift.toolchain.MacroBuildProbe`) and
the two outputs are grepped for known failure markers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, List

from ..logging import get_logger
from ..models import Category, Diagnostic, Severity, severity_from_code
from ..toolchain import BuildComparison, MacroBuildProbe, ToolchainError
from .base import Analyzer, PackageContext

_logger = get_logger("analyzers.macros")

_MACRO_ATTRIBUTE = re.compile(r"@\w+")


class MacroFramework(str, Enum):
    TCA = "tca"
    SWIFT_DATA = "swiftData"
    DEPENDENCIES = "dependencies"
    PERCEPTION = "perception"
    CUSTOM_MACROS = "customMacros"
    UNKNOWN = "unknown"


class MacroIssue(Enum):
    """Known macro failure modes: (description, severity code, fix)."""

    SWIFT6_EQUATABLE_BUG = (
        "Swift 6 @Reducer State conformance synthesis issue",
        "high",
        "Use @Reducer(state: .equatable, .sendable) instead of manual conformances",
    )
    EXECUTION_POLICY_EXCEPTION = (
        "Macro plugin blocked by execution policy (RegisterExecutionPolicyException)",
        "critical",
        "Trust the macro plugin in Xcode or build with -skipMacroValidation",
    )
    MACRO_VALIDATION_FAILURE = (
        "Build fails only when macro validation is enabled",
        "high",
        "Build with -Xswiftc -skipMacroValidation and update the macro package",
    )
    EXTERNAL_MACRO_NOT_FOUND = (
        "External macro implementation could not be found",
        "high",
        "Clean the build folder and re-resolve packages so the macro plugin is rebuilt",
    )
    MACRO_EXPANSION_TIMEOUT = (
        "Macro expansion timed out",
        "medium",
        "Simplify macro-annotated types or split large declarations",
    )

    @property
    def description(self) -> str:
        return self.value[0]

    @property
    def severity_code(self) -> str:
        return self.value[1]

    @property
    def fix(self) -> str:
        return self.value[2]

    @property
    def severity(self) -> Severity:
        return severity_from_code(self.severity_code)


_RECOMMENDATIONS = {
    MacroFramework.TCA: (
        "For TCA @Reducer issues, try adding @Reducer(state: .equatable, .sendable)",
        "Check for missing State conformance in domain models",
    ),
    MacroFramework.SWIFT_DATA: (
        "For SwiftData @Model issues, try -skipMacroValidation flag",
        "Verify @ObservableModel usage and macro expansion",
    ),
    MacroFramework.DEPENDENCIES: (
        "For @DependencyClient issues, check client conformance",
        "Verify @Dependency key paths and registration",
    ),
    MacroFramework.PERCEPTION: (
        "For Perception, verify @Perception usage with ObservableObject and proper import statements",
    ),
    MacroFramework.CUSTOM_MACROS: (
        "For custom macros, verify macro implementation and expansion behavior",
    ),
}


@dataclass
class MacroReport:
    frameworks: List[MacroFramework] = field(default_factory=list)
    issues: List[MacroIssue] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    @property
    def primary_framework(self) -> MacroFramework:
        return self.frameworks[0] if self.frameworks else MacroFramework.UNKNOWN


def detect_frameworks(manifest_text: str) -> List[MacroFramework]:
    """Return detected frameworks in precedence order."""
    found: List[MacroFramework] = []
    if "swift-composable-architecture" in manifest_text:
        found.append(MacroFramework.TCA)
    if any(marker in manifest_text for marker in ("SwiftData", "@Model", "@ObservableModel")):
        found.append(MacroFramework.SWIFT_DATA)
    if "swift-dependencies" in manifest_text or "@Dependency" in manifest_text:
        found.append(MacroFramework.DEPENDENCIES)
    if "swift-perception" in manifest_text or "@Perception" in manifest_text:
        found.append(MacroFramework.PERCEPTION)
    if not found and _MACRO_ATTRIBUTE.search(manifest_text):
        found.append(MacroFramework.CUSTOM_MACROS)
    return found


def manifest_issues(manifest_text: str) -> List[MacroIssue]:
    if (
        "swift-composable-architecture" in manifest_text
        and "@Reducer" in manifest_text
        and ("State: Equatable" in manifest_text or "State: Sendable" in manifest_text)
    ):
        return [MacroIssue.SWIFT6_EQUATABLE_BUG]
    return []


def classify_build_outputs(comparison: BuildComparison) -> List[MacroIssue]:
    """Grep the two build heads for macro failure markers."""
    normal = comparison.normal_output
    skipped = comparison.skip_validation_output
    issues: List[MacroIssue] = []
    if "RegisterExecutionPolicyException" in normal:
        issues.append(MacroIssue.EXECUTION_POLICY_EXCEPTION)
    if "error" in normal and "error" not in skipped:
        issues.append(MacroIssue.MACRO_VALIDATION_FAILURE)
    if "External macro implementation could not be found" in normal:
        issues.append(MacroIssue.EXTERNAL_MACRO_NOT_FOUND)
    if "macro expansion timeout" in normal or "timed out" in normal:
        issues.append(MacroIssue.MACRO_EXPANSION_TIMEOUT)
    return issues


def recommendations_for(framework: MacroFramework) -> List[str]:
    return list(dict.fromkeys(_RECOMMENDATIONS.get(framework, ())))


def diagnose_macros(manifest_path: Path, probe: MacroBuildProbe) -> MacroReport:
    """Detect frameworks and, if any, run the comparative build probe."""
    try:
        text = manifest_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        _logger.warning("Failed to read %s for macro analysis: %s", manifest_path, exc)
        return MacroReport()

    frameworks = detect_frameworks(text)
    issues = manifest_issues(text)
    if frameworks:
        comparison = probe.compare_builds(manifest_path.parent)
        issues.extend(classify_build_outputs(comparison))

    report = MacroReport(frameworks=frameworks, issues=issues)
    report.recommendations = recommendations_for(report.primary_framework)
    return report


def macro_diagnostics(report: MacroReport) -> List[Diagnostic]:
    diagnostics = [
        Diagnostic(
            severity=issue.severity,
            category=Category.COMPILATION,
            message=f"Macro Issue: {issue.description}",
            suggestion=issue.fix,
        )
        for issue in report.issues
    ]
    if report.issues and report.recommendations:
        diagnostics.append(
            Diagnostic(
                severity=Severity.INFO,
                category=Category.COMPILATION,
                message="Macro diagnostic recommendations available",
                suggestion="Review framework-specific macro usage patterns",
            )
        )
    return diagnostics


class MacroAnalyzer(Analyzer):
    name = "macros"

    def supports(self, context: PackageContext) -> bool:
        return True

    def analyze(self, context: PackageContext) -> Iterable[Diagnostic]:
        if not context.manifest_path.exists():
            return [
                Diagnostic(
                    severity=Severity.INFO,
                    category=Category.COMPILATION,
                    message="Package.swift not found for macro analysis",
                    suggestion="Ensure Package.swift exists in the package root",
                )
            ]
        try:
            report = diagnose_macros(context.manifest_path, context.probe)
        except ToolchainError as exc:
            return [
                Diagnostic(
                    severity=Severity.ERROR,
                    category=Category.COMPILATION,
                    message=f"Cannot run macro build probe: {exc}",
                    suggestion="Verify Swift installation and package configuration",
                )
            ]
        _logger.info(
            "Macro analysis: framework=%s issues=%d",
            report.primary_framework.value,
            len(report.issues),
        )
        for line in report.recommendations if report.issues else ():
            _logger.info("Macro recommendation: %s", line)
        return macro_diagnostics(report)
