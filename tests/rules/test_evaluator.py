"""Tests for pattern rule evaluation."""

from __future__ import annotations

import textwrap

from spmsift.models import Category, Severity
from spmsift.rules import RuleKind, RuleTables, evaluate_rules, load_rule_tables


def _source(text: str) -> str:
    return textwrap.dedent(text).lstrip("\n")


def test_modern_feature_reports_positives_only() -> None:
    text = _source(
        """
        @Reducer
        struct Counter {
          @ObservableState
          struct State: Equatable { var count = 0 }
        }

        struct CounterView: View {
          @Bindable var store: StoreOf<Counter>
        }
        """
    )
    evaluation = evaluate_rules(text, load_rule_tables(), file="Counter.swift")
    assert evaluation.issues == []
    assert evaluation.positives == [
        "Using modern @Reducer macro",
        "Using @ObservableState for state",
        "Using @Bindable for view bindings",
    ]


def test_deprecated_and_anti_patterns_are_all_reported() -> None:
    text = _source(
        """
        struct LegacyView: View {
          let store: StoreOf<Legacy>
          var body: some View {
            WithViewStore(store, observe: { $0 }) { viewStore in
              Text(Date().description)
            }
            .task { Task.detached { await work() } }
          }
        }
        """
    )
    evaluation = evaluate_rules(text, load_rule_tables(), file="LegacyView.swift")
    messages = [issue.message for issue in evaluation.issues]
    assert "WithViewStore is deprecated. Use @Bindable instead" in messages
    assert "ViewStore initialization is deprecated. Use @Bindable" in messages
    assert "Task.detached is discouraged. Use Task { @MainActor in }" in messages
    assert "Direct Date() calls. Use dependencies instead" in messages
    assert evaluation.error_count == 2
    assert evaluation.warning_count == 2
    assert all(issue.file == "LegacyView.swift" for issue in evaluation.issues)


def test_contextual_rules_only_run_when_marker_present() -> None:
    flagged = 'content.sheet(item: $model.state.destination) { item in Text("") }\n'
    evaluation = evaluate_rules(flagged, load_rule_tables())
    assert [issue.message for issue in evaluation.issues] == [
        ".sheet(item:) with state binding - ensure proper lifecycle"
    ]
    assert evaluation.issues[0].severity is Severity.WARNING
    assert evaluation.issues[0].kind is RuleKind.CONTEXTUAL

    tables = RuleTables.from_mapping(
        {"contextual": [{"marker": ".popover(", "rules": [{"pattern": "item:", "message": "gated"}]}]}
    )
    assert evaluate_rules(flagged, tables).issues == []


def test_identical_rule_matches_are_reported_once() -> None:
    rule = {"pattern": "print\\(", "message": "Use Logger", "severity": "warning"}
    tables = RuleTables.from_mapping({"anti_patterns": [rule, dict(rule)]})
    evaluation = evaluate_rules('print("a")\nprint("b")\n', tables, file="Log.swift")
    assert len(evaluation.issues) == 1


def test_issue_converts_to_compilation_diagnostic() -> None:
    evaluation = evaluate_rules("WithViewStore(store)", load_rule_tables(), file="View.swift")
    diagnostic = evaluation.issues[0].to_diagnostic()
    assert diagnostic.category is Category.COMPILATION
    assert diagnostic.severity is Severity.ERROR
    assert str(diagnostic.location) == "View.swift"
    assert diagnostic.suggestion == "See: AGENTS-TCA-PATTERNS.md Mistake 1"
