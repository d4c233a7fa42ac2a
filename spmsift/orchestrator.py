"""Coordinates the analyze / validate / parse / pattern / route commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .analyzers import MANIFEST_FILENAME, Analyzer, PackageContext, discover_analyzers
from .analyzers.resolved import collect_resolved
from .config import SiftConfig, load_config
from .logging import get_logger
from .models import (
    AnalysisReport,
    Category,
    CommandResult,
    Diagnostic,
    PhaseResult,
    Severity,
    has_errors,
)
from .parsers import DumpPackageParser, IssueType, PackageAnalysis, parse_output
from .routing import RoutingDecision, route_task
from .rules import PatternIssue, load_rule_tables, evaluate_rules
from .scanning import find_swift_files, read_text
from .toolchain import MacroBuildProbe, SwiftToolchain, ToolchainError

HANG_RECOMMENDATIONS: tuple[str, ...] = (
    "Use 'swift package --allow-writing-to-package-directory resolve' for dependency issues",
    "Check for circular dependencies between local packages",
    "Verify platform compatibility in Package.swift",
    "Consider using dependency caching with '--cache-path'",
)

GENERIC_OPTIMIZATIONS: tuple[str, ...] = (
    "Use specific version constraints for dependencies",
    "Enable platform-specific optimizations",
    "Consider using conditional compilation for unused features",
)


class PackageNotFoundError(FileNotFoundError):
    """Raised when a package root has no Package.swift."""


class InvalidScanPathError(RuntimeError):
    """Raised when a pattern scan target is not a Swift file or has none."""


class EmptyInputError(RuntimeError):
    """Raised when the parse command receives no input."""


@dataclass
class ValidationOptions:
    deep: bool = False
    check_resolved: bool = False
    flag_branch_deps: bool = False
    macro_diagnostics: bool = False
    tca_patterns: bool = False

    def analyzer_names(self) -> List[str]:
        names = ["manifest"]
        if self.deep:
            names.append("dependencies")
        if self.check_resolved:
            names.append("resolved")
        if self.macro_diagnostics:
            names.append("macros")
        if self.tca_patterns:
            names.append("tca")
        return names


@dataclass
class ValidationResult:
    package_path: str
    checks: List[str] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return has_errors(self.diagnostics)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "package_path": self.package_path,
            "checks": list(self.checks),
            "diagnostics": [item.to_dict() for item in self.diagnostics],
        }


@dataclass
class FileEvaluation:
    name: str
    issues: List[PatternIssue] = field(default_factory=list)
    positives: List[str] = field(default_factory=list)


@dataclass
class PatternScan:
    """Per-file rule evaluation results for ``tca-patterns``."""

    path: str
    files: List[FileEvaluation] = field(default_factory=list)

    @property
    def issues(self) -> List[PatternIssue]:
        return [issue for entry in self.files for issue in entry.issues]

    @property
    def issue_count(self) -> int:
        return len(self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity.at_least(Severity.ERROR))

    @property
    def warning_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity is Severity.WARNING)

    @property
    def positive_count(self) -> int:
        return sum(len(entry.positives) for entry in self.files)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "files": [
                {
                    "name": entry.name,
                    "issues": [issue.to_diagnostic().to_dict() for issue in entry.issues],
                    "positives": list(entry.positives),
                }
                for entry in self.files
            ],
            "summary": {
                "issues": self.issue_count,
                "errors": self.error_count,
                "warnings": self.warning_count,
                "positives": self.positive_count,
            },
        }


@dataclass
class OptimizationResult:
    package_path: str
    recommendations: List[str] = field(default_factory=list)


class Orchestrator:
    """Runs each command against a package and collects diagnostics."""

    def __init__(
        self,
        toolchain: SwiftToolchain | None = None,
        probe: MacroBuildProbe | None = None,
        analyzers: Optional[Iterable[Analyzer]] = None,
        config_path: Path | None = None,
    ) -> None:
        self._toolchain = toolchain
        self._probe = probe
        self._analyzer_overrides = list(analyzers) if analyzers is not None else None
        self.config_path = config_path
        self.logger = get_logger("orchestrator")

    # analyze

    def run_analyze(self, path: str, *, hang_detection: bool = False) -> AnalysisReport:
        root = self._resolve_package(path)
        config = self._load_config(root)
        toolchain = self._toolchain_for(config)
        self.logger.info("Analyzing Swift package at %s", root)

        phases: List[PhaseResult] = []
        diagnostics: List[Diagnostic] = []
        target_count = 0

        dump = self._run_phase(toolchain, ["dump-package"], root, config)
        if dump is not None and dump.success:
            phases.append(PhaseResult("Package Dump", "success", dump.duration))
            parsed = DumpPackageParser().parse(dump.output)
            target_count = parsed.targets.count if parsed.targets is not None else 0
            diagnostics.extend(structure_diagnostics(parsed))
        else:
            phases.append(PhaseResult("Package Dump", "failed", dump.duration if dump else 0.0))
            if dump is None:
                reason = f"Toolchain executable not found: {config.toolchain.executable}"
            else:
                reason = dump.error or "Unknown error"
            diagnostics.append(
                Diagnostic(
                    severity=Severity.ERROR,
                    category=Category.COMPILATION,
                    message=f"Failed to dump package: {reason}",
                    suggestion="Check Package.swift syntax",
                )
            )

        deps = self._run_phase(toolchain, ["show-dependencies"], root, config)
        if deps is not None and deps.success:
            phases.append(PhaseResult("Dependencies Check", "success", deps.duration))
        else:
            diagnostics.append(
                Diagnostic(
                    severity=Severity.WARNING,
                    category=Category.DEPENDENCY,
                    message="Failed to show dependencies",
                    suggestion="Run 'swift package resolve' to update dependencies",
                )
            )

        status = "failed" if has_errors(diagnostics) else "success"
        self.logger.info("Analysis finished with status %s (%d diagnostics)", status, len(diagnostics))
        return AnalysisReport(
            package_path=str(root),
            status=status,
            phases=phases,
            target_count=target_count,
            diagnostics=diagnostics,
            recommendations=list(HANG_RECOMMENDATIONS) if hang_detection else [],
        )

    def _run_phase(
        self, toolchain: SwiftToolchain, args: Sequence[str], root: Path, config: SiftConfig
    ) -> Optional[CommandResult]:
        try:
            return toolchain.run_package(args, root, timeout=config.toolchain.timeout)
        except ToolchainError as exc:
            self.logger.warning("%s", exc)
            return None

    # validate

    def run_validate(self, path: str, options: ValidationOptions | None = None) -> ValidationResult:
        options = options or ValidationOptions()
        root = self._resolve_package(path)
        config = self._load_config(root)
        context = self._build_context(root, config, flag_branch_deps=options.flag_branch_deps)

        analyzers = self._select_analyzers(options.analyzer_names())
        self.logger.debug("Selected %d analyzers", len(analyzers))

        result = ValidationResult(package_path=str(root))
        for analyzer in analyzers:
            if not analyzer.supports(context):
                self.logger.debug("Skipping analyzer %s", analyzer.name)
                continue
            result.checks.append(analyzer.name)
            result.diagnostics.extend(self._execute_analyzer(analyzer, context))
        return result

    def _execute_analyzer(self, analyzer: Analyzer, context: PackageContext) -> List[Diagnostic]:
        self.logger.debug("Running analyzer %s", analyzer.__class__.__name__)
        try:
            return list(analyzer.analyze(context))
        except Exception as exc:
            # One failing check must not stop the others.
            self.logger.error("Analyzer %s failed: %s", analyzer.name, exc)
            self.logger.debug("Analyzer failure details", exc_info=True)
            return [
                Diagnostic(
                    severity=Severity.ERROR,
                    category=Category.UNKNOWN,
                    message=f"{analyzer.name} check failed: {exc}",
                    suggestion="Re-run with --verbose for details",
                )
            ]

    def _select_analyzers(self, names: Sequence[str]) -> List[Analyzer]:
        if self._analyzer_overrides is not None:
            wanted = {name.lower() for name in names}
            return [analyzer for analyzer in self._analyzer_overrides if analyzer.name.lower() in wanted]
        return discover_analyzers(names)

    # tca-patterns

    def run_patterns(self, path: str, *, min_severity: Severity = Severity.WARNING) -> PatternScan:
        target = Path(path).expanduser().resolve()
        if not target.exists():
            raise FileNotFoundError(f"Path '{target}' does not exist")

        if target.is_file():
            if target.suffix != ".swift":
                raise InvalidScanPathError(f"'{target}' is not a Swift file or directory")
            config = self._load_config(target.parent)
            files = [target]
        else:
            config = self._load_config(target)
            files = find_swift_files(target, config.exclude_paths)

        if not files:
            raise InvalidScanPathError("No Swift files found")

        tables = load_rule_tables(config.rules.path)
        scan = PatternScan(path=str(target))
        for file_path in files:
            entry = FileEvaluation(name=file_path.name)
            text = read_text(file_path)
            if text is None:
                self.logger.error("Error reading file: %s", file_path)
                scan.files.append(entry)
                continue
            evaluation = evaluate_rules(text, tables, file=file_path.name)
            entry.issues = [issue for issue in evaluation.issues if issue.severity.at_least(min_severity)]
            entry.positives = evaluation.positives
            scan.files.append(entry)
        self.logger.info("Scanned %d Swift file(s), %d issue(s)", len(scan.files), scan.issue_count)
        return scan

    # parse

    def run_parse(
        self,
        text: str,
        *,
        target: Optional[str] = None,
        include_raw: bool = False,
    ) -> PackageAnalysis:
        if not text or not text.strip():
            raise EmptyInputError("No input received")
        return parse_output(text, target_filter=target, include_raw=include_raw)

    # optimize

    def run_optimize(self, path: str) -> OptimizationResult:
        root = Path(path).expanduser().resolve()
        if not root.is_dir():
            raise FileNotFoundError(f"Package directory '{root}' does not exist")

        recommendations: List[str] = []
        summary, found = collect_resolved(root)
        if found and summary.flagged:
            names = ", ".join(summary.unique_identities())
            recommendations.append(f"Pin {summary.flagged} branch dependencies to versions: {names}")

        manifest = read_text(root / MANIFEST_FILENAME)
        if manifest is not None:
            if "unsafeFlags" in manifest:
                recommendations.append(
                    "Remove unsafeFlags from target settings; packages using them cannot be consumed as dependencies"
                )
            if "platforms:" not in manifest:
                recommendations.append("Declare supported platforms in Package.swift")
            if "branch:" in manifest or ".branch(" in manifest:
                recommendations.append(GENERIC_OPTIMIZATIONS[0])

        if not recommendations:
            recommendations = list(GENERIC_OPTIMIZATIONS)
        return OptimizationResult(package_path=str(root), recommendations=recommendations)

    # reading-router

    def run_route(self, task: str, *, case_study_dir: Path | None = None) -> RoutingDecision:
        directory = case_study_dir
        if directory is None:
            config = self._load_config(Path.cwd())
            directory = config.router.case_studies_dir or Path.cwd()
        return route_task(task, directory)

    # helpers

    @staticmethod
    def _resolve_package(path: str) -> Path:
        root = Path(path).expanduser().resolve()
        if not (root / MANIFEST_FILENAME).exists():
            raise PackageNotFoundError(f"Package.swift not found at {root}")
        return root

    def _load_config(self, root: Path) -> SiftConfig:
        return load_config(self.config_path or root)

    def _toolchain_for(self, config: SiftConfig) -> SwiftToolchain:
        if self._toolchain is not None:
            return self._toolchain
        return SwiftToolchain(config.toolchain.executable)

    def _build_context(self, root: Path, config: SiftConfig, *, flag_branch_deps: bool) -> PackageContext:
        toolchain = self._toolchain_for(config)
        probe = self._probe or MacroBuildProbe(
            toolchain,
            timeout=config.toolchain.timeout,
            max_lines=config.toolchain.output_lines,
        )
        return PackageContext(
            root=root,
            config=config,
            toolchain=toolchain,
            probe=probe,
            tables=load_rule_tables(config.rules.path),
            flag_branch_deps=flag_branch_deps,
        )


def structure_diagnostics(parsed: PackageAnalysis) -> List[Diagnostic]:
    """Turn dump-package structure issues into diagnostics."""
    diagnostics: List[Diagnostic] = []
    for issue in parsed.issues:
        if issue.type is IssueType.MISSING_TARGET:
            diagnostics.append(
                Diagnostic(
                    severity=Severity.WARNING,
                    category=Category.CONFIGURATION,
                    message=issue.message,
                    suggestion="Add at least one target to Package.swift",
                )
            )
        elif issue.type is IssueType.PERFORMANCE:
            diagnostics.append(
                Diagnostic(
                    severity=Severity.WARNING,
                    category=Category.PERFORMANCE,
                    message=issue.message,
                    suggestion="Consider splitting into multiple packages",
                )
            )
        elif issue.type is IssueType.SYNTAX_ERROR:
            diagnostics.append(
                Diagnostic(
                    severity=Severity.ERROR,
                    category=Category.CONFIGURATION,
                    message=issue.message,
                    suggestion="Check the output of 'swift package dump-package'",
                )
            )
    return diagnostics


__all__ = [
    "EmptyInputError",
    "FileEvaluation",
    "GENERIC_OPTIMIZATIONS",
    "HANG_RECOMMENDATIONS",
    "InvalidScanPathError",
    "OptimizationResult",
    "Orchestrator",
    "PackageNotFoundError",
    "PatternScan",
    "ValidationOptions",
    "ValidationResult",
    "structure_diagnostics",
]
