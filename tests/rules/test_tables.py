"""Tests for rule table loading."""

from __future__ import annotations

import pytest

from spmsift.config import ConfigError
from spmsift.models import Severity
from spmsift.rules import RuleKind, RuleTables, load_rule_tables
from spmsift.rules.tables import DEFAULT_CONTEXT_MARKER


def test_bundled_tables_load_every_section() -> None:
    tables = load_rule_tables()
    assert len(tables.deprecated) == 3
    assert len(tables.anti_patterns) == 4
    assert len(tables.required) == 3
    assert [gate.marker for gate in tables.contextual] == [".sheet("]
    assert len(tables) == 11
    assert tables.composition.grouping_token == "CombineReducers("


def test_bundled_severities_follow_rule_kind() -> None:
    tables = load_rule_tables()
    assert all(rule.severity is Severity.ERROR for rule in tables.deprecated)
    assert all(rule.severity is None for rule in tables.required)
    by_message = {rule.message: rule.severity for rule in tables.anti_patterns}
    assert by_message["Task.detached is discouraged. Use Task { @MainActor in }"] is Severity.WARNING
    assert by_message["Wrong Shared constructor. Use Shared(wrappedValue:)"] is Severity.ERROR


def test_from_mapping_drops_invalid_rules() -> None:
    tables = RuleTables.from_mapping(
        {
            "deprecated": [
                {"pattern": "OldAPI\\(", "message": "OldAPI is gone"},
                {"pattern": "([unclosed", "message": "bad regex"},
                {"message": "no pattern"},
                "not a mapping",
            ],
            "anti_patterns": [{"pattern": "print\\(", "message": "Use Logger", "severity": "medium"}],
        }
    )
    assert [rule.message for rule in tables.deprecated] == ["OldAPI is gone"]
    assert tables.deprecated[0].kind is RuleKind.DEPRECATED
    assert tables.anti_patterns[0].severity is Severity.WARNING


def test_contextual_gate_defaults_marker() -> None:
    tables = RuleTables.from_mapping(
        {"contextual": [{"rules": [{"pattern": "item:", "message": "gated", "severity": "low"}]}]}
    )
    assert tables.contextual[0].marker == DEFAULT_CONTEXT_MARKER
    assert tables.contextual[0].rules[0].severity is Severity.INFO


def test_custom_composition_vocabulary_keeps_defaults_for_missing_keys() -> None:
    tables = RuleTables.from_mapping(
        {"composition": {"grouping_token": "Group(", "component_pattern": "([broken"}}
    )
    assert tables.composition.grouping_token == "Group("
    assert tables.composition.body_trigger == "var body: some ReducerOf<Self>"
    assert tables.composition.component_pattern.pattern == r"^\w+Feature\(\)|^\w+Reducer\(\)"


def test_load_rule_tables_from_file(tmp_path) -> None:
    path = tmp_path / "rules.yml"
    path.write_text(
        "deprecated:\n  - pattern: 'LegacyStore'\n    message: 'LegacyStore is deprecated'\n",
        encoding="utf-8",
    )
    tables = load_rule_tables(path)
    assert len(tables) == 1
    assert tables.anti_patterns == ()


def test_load_rule_tables_reports_unreadable_and_invalid_files(tmp_path) -> None:
    with pytest.raises(ConfigError):
        load_rule_tables(tmp_path / "missing.yml")

    broken = tmp_path / "broken.yml"
    broken.write_text("deprecated: [\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_rule_tables(broken)

    listed = tmp_path / "list.yml"
    listed.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_rule_tables(listed)
