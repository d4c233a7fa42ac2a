"""Evaluates pattern rule tables against Swift source text."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

from ..models import Category, Diagnostic, Location, Severity
from .tables import PatternRule, RuleKind, RuleTables


@dataclass(frozen=True)
class PatternIssue:
    """A rule match that should be reported as a problem."""

    severity: Severity
    kind: RuleKind
    message: str
    reference: Optional[str] = None
    file: Optional[str] = None

    def to_diagnostic(self) -> Diagnostic:
        suggestion = f"See: {self.reference}" if self.reference else None
        return Diagnostic(
            severity=self.severity,
            category=Category.COMPILATION,
            message=self.message,
            location=Location(self.file) if self.file else None,
            suggestion=suggestion,
        )


@dataclass
class RuleEvaluation:
    """Issues and positive findings for one file."""

    issues: List[PatternIssue] = field(default_factory=list)
    positives: List[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity.at_least(Severity.ERROR))

    @property
    def warning_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity is Severity.WARNING)


def evaluate_rules(text: str, tables: RuleTables, *, file: Optional[str] = None) -> RuleEvaluation:
    """Run every rule of every table against ``text``.

    Tables are not mutually exclusive and evaluation never stops at the first
    match. Identical (rule, file) issue pairs are reported once; positive
    matches are collected as-is.
    """
    result = RuleEvaluation()
    seen: Set[Tuple[PatternRule, Optional[str]]] = set()

    def _record(rule: PatternRule) -> None:
        key = (rule, file)
        if key in seen:
            return
        seen.add(key)
        result.issues.append(
            PatternIssue(
                severity=rule.severity or Severity.ERROR,
                kind=rule.kind,
                message=rule.message,
                reference=rule.reference,
                file=file,
            )
        )

    for rule in tables.deprecated:
        if rule.search(text):
            _record(rule)

    for rule in tables.anti_patterns:
        if rule.search(text):
            _record(rule)

    for rule in tables.required:
        if rule.search(text):
            result.positives.append(rule.message)

    for gate in tables.contextual:
        if not gate.applies_to(text):
            continue
        for rule in gate.rules:
            if rule.search(text):
                _record(rule)

    return result


__all__ = ["PatternIssue", "RuleEvaluation", "evaluate_rules"]
