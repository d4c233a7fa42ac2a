"""Tests for command detection and parse dispatch."""

from __future__ import annotations

import json

import pytest

from spmsift.models import Severity
from spmsift.parsers import CommandKind, detect_kind, parse_output, parse_resolved
from tests._fixtures.package_builder import branch_pin, revision_pin, version_pin


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ('{"pins": [], "version": 2}', CommandKind.RESOLVED),
        ('{"object": {"pins": []}, "version": 1}', CommandKind.RESOLVED),
        ('{"identity": "app", "name": "App", "dependencies": []}', CommandKind.SHOW_DEPENDENCIES),
        ('{"name": "App", "targets": []}', CommandKind.DUMP_PACKAGE),
        ("{ not valid", CommandKind.DUMP_PACKAGE),
        (".\n└── swift-dependencies<https://x@1.0.0>\n", CommandKind.SHOW_DEPENDENCIES),
        ("Name: Sample\nTools version: 5.9\n", CommandKind.DESCRIBE),
        ("Package Name: Sample\n", CommandKind.DESCRIBE),
        ("/a/B.swift:1:1: error: nope\n", CommandKind.BUILD),
    ],
)
def test_detect_kind(text: str, expected: CommandKind) -> None:
    assert detect_kind(text) is expected


def test_parse_resolved_lists_pins_and_flags_branches() -> None:
    text = json.dumps({"pins": [branch_pin("swift-sharing"), version_pin("swift-tca", "1.15.0"), revision_pin("nav")]})
    result = parse_resolved(text)
    assert result.command is CommandKind.RESOLVED
    assert result.success
    versions = {dep.name: dep.version for dep in result.dependencies.external}
    assert versions == {
        "swift-sharing": "branch: main",
        "swift-tca": "1.15.0",
        "nav": "revision: abcdef0",
    }
    assert [(issue.severity, issue.message) for issue in result.issues] == [
        (Severity.WARNING, "Branch dependency: swift-sharing"),
        (Severity.WARNING, "Branch dependency: nav (revision-only)"),
    ]


def test_parse_output_records_metrics_and_raw() -> None:
    text = '{"name": "App", "targets": [{"name": "App", "type": "executable"}]}'
    result = parse_output(text, include_raw=True)
    assert result.command is CommandKind.DUMP_PACKAGE
    assert result.parse_time >= 0
    payload = result.to_dict()
    assert payload["raw"] == text
    assert payload["targets"]["count"] == 1
    assert "parse_time" in payload["metrics"]

    assert "raw" not in parse_output(text).to_dict()


def test_parse_output_honours_explicit_kind() -> None:
    result = parse_output("error: something broke\n", kind=CommandKind.DESCRIBE)
    assert result.command is CommandKind.DESCRIBE
    assert result.error_count == 1
