"""Dependency resolution check backed by ``swift package resolve``."""

from __future__ import annotations

from typing import Iterable, List

from ..logging import get_logger
from ..models import Category, Diagnostic, Severity
from ..toolchain import ToolchainError
from .base import Analyzer, PackageContext


class DependencyResolutionAnalyzer(Analyzer):
    """Runs ``swift package resolve`` and reports failures as diagnostics."""

    name = "dependencies"

    def __init__(self) -> None:
        self.logger = get_logger("analyzers.dependencies")

    def supports(self, context: PackageContext) -> bool:
        return context.manifest_path.exists()

    def analyze(self, context: PackageContext) -> Iterable[Diagnostic]:
        issues: List[Diagnostic] = []
        try:
            result = context.toolchain.run_package(
                ["resolve"], context.root, timeout=context.config.toolchain.timeout
            )
        except ToolchainError as exc:
            self.logger.warning("Dependency resolution could not start: %s", exc)
            issues.append(
                Diagnostic(
                    severity=Severity.ERROR,
                    category=Category.DEPENDENCY,
                    message=f"Cannot run dependency resolution: {exc}",
                    suggestion="Verify Swift installation and package configuration",
                )
            )
            return issues

        if not result.success:
            self.logger.info("Dependency resolution failed after %.2fs", result.duration)
            issues.append(
                Diagnostic(
                    severity=Severity.WARNING,
                    category=Category.DEPENDENCY,
                    message="Dependency resolution failed",
                    suggestion="Check network connection and dependency URLs",
                )
            )
        return issues
