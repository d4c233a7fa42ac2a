"""Sanity checks for the Package.swift manifest itself."""

from __future__ import annotations

from typing import Iterable, List

from ..models import Category, Diagnostic, Severity
from ..scanning import contains, strip_line_comment
from .base import Analyzer, PackageContext


def declares_package(content: str) -> bool:
    """True when a non-comment line of the manifest calls ``Package(``."""
    return any(contains(strip_line_comment(line), "Package(") for line in content.splitlines())


class ManifestAnalyzer(Analyzer):
    name = "manifest"

    def supports(self, context: PackageContext) -> bool:
        return True

    def analyze(self, context: PackageContext) -> Iterable[Diagnostic]:
        issues: List[Diagnostic] = []
        try:
            content = context.manifest_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            issues.append(
                Diagnostic(
                    severity=Severity.ERROR,
                    category=Category.CONFIGURATION,
                    message=f"Cannot read Package.swift: {exc}",
                    suggestion="Check file permissions and encoding",
                )
            )
            return issues

        if not content.strip():
            issues.append(
                Diagnostic(
                    severity=Severity.ERROR,
                    category=Category.CONFIGURATION,
                    message="Package.swift is empty",
                    suggestion="Add proper package manifest content",
                )
            )
        elif not declares_package(content):
            issues.append(
                Diagnostic(
                    severity=Severity.ERROR,
                    category=Category.CONFIGURATION,
                    message="Package.swift does not declare a Package",
                    suggestion="Define the manifest with 'let package = Package(name: ...)'",
                )
            )
        return issues
