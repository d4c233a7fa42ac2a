"""Source-level checks for reducer composition and dependency access."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from ..logging import get_logger
from ..models import Category, Diagnostic, Location, Severity
from ..rules import CompositionVocabulary
from ..scanning import contains, read_text, strip_line_comment
from .base import Analyzer, PackageContext
from .composition import analyze_body, analyze_builder

NON_SENDABLE_TYPES = frozenset({"URLSession", "Timer", "FileHandle", "DispatchQueue"})

_DEPENDENCY_VAR = re.compile(r"@Dependency.*var\s+(\w+)(?:\s*:\s*(\w+))?")


def dependency_declaration(line: str) -> Optional[Tuple[str, Optional[str]]]:
    """Return the declared variable name and its type annotation, if any."""
    match = _DEPENDENCY_VAR.search(line)
    if match is None:
        return None
    return match.group(1), match.group(2)


def check_source(
    text: str,
    file: str,
    vocabulary: Optional[CompositionVocabulary] = None,
) -> List[Diagnostic]:
    """Run the line-oriented checks over one Swift file."""
    vocabulary = vocabulary or CompositionVocabulary()
    lines = text.splitlines()
    diagnostics: List[Diagnostic] = []

    for index, line in enumerate(lines):
        line_number = index + 1
        code = strip_line_comment(line)

        if contains(code, vocabulary.body_trigger):
            diagnostics.extend(
                analyze_body(lines, index + 1, file=file, line_number=line_number, vocabulary=vocabulary)
            )

        if contains(code, vocabulary.builder_trigger):
            diagnostics.extend(
                analyze_builder(lines, index + 1, file=file, line_number=line_number, vocabulary=vocabulary)
            )

        if not contains(code, "@Dependency"):
            continue

        if contains(code, "date.now"):
            diagnostics.append(
                Diagnostic(
                    severity=Severity.ERROR,
                    category=Category.COMPILATION,
                    message="Incorrect date.now access - should use date() for callable DateGenerator",
                    location=Location(file, line_number),
                    suggestion="Replace date.now with date() - @Dependency(\\.date) provides a function, not a property",
                )
            )

        if contains(code, "var ") and not contains(code, "@State"):
            diagnostic = _non_sendable_dependency(code, file, line_number)
            if diagnostic is not None:
                diagnostics.append(diagnostic)

    return diagnostics


def _non_sendable_dependency(code: str, file: str, line_number: int) -> Optional[Diagnostic]:
    declaration = dependency_declaration(code)
    if declaration is None:
        return None
    variable, annotation = declaration
    offending = next((name for name in (variable, annotation) if name in NON_SENDABLE_TYPES), None)
    if offending is None:
        return None
    declared = f"{variable}: {annotation}" if annotation else variable
    return Diagnostic(
        severity=Severity.WARNING,
        category=Category.COMPILATION,
        message=f"Non-Sendable dependency '{offending}' should be marked with @State",
        location=Location(file, line_number),
        suggestion=f"Add @State: @State @Dependency var {declared}",
    )


class SourcePatternAnalyzer(Analyzer):
    """Scans every Swift file in the package for composition anti-patterns."""

    name = "tca"

    def __init__(self) -> None:
        self.logger = get_logger("analyzers.source")

    def supports(self, context: PackageContext) -> bool:
        return context.root.is_dir()

    def analyze(self, context: PackageContext) -> Iterable[Diagnostic]:
        diagnostics: List[Diagnostic] = []
        vocabulary = context.tables.composition
        for path in context.swift_files():
            text = read_text(path)
            if text is None:
                self.logger.debug("Skipping unreadable source %s", path)
                continue
            diagnostics.extend(check_source(text, Path(path).name, vocabulary))
        self.logger.debug("Source checks produced %d diagnostics", len(diagnostics))
        return diagnostics
