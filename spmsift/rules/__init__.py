"""Pattern rule tables and their evaluation."""

from .evaluator import PatternIssue, RuleEvaluation, evaluate_rules
from .tables import (
    CompositionVocabulary,
    ContextGate,
    PatternRule,
    RuleKind,
    RuleTables,
    load_rule_tables,
)

__all__ = [
    "CompositionVocabulary",
    "ContextGate",
    "PatternIssue",
    "PatternRule",
    "RuleEvaluation",
    "RuleKind",
    "RuleTables",
    "evaluate_rules",
    "load_rule_tables",
]
