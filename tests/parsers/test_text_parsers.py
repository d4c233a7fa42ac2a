"""Tests for the describe, show-dependencies and build log parsers."""

from __future__ import annotations

import json
import textwrap

from spmsift.models import Severity
from spmsift.parsers import (
    BuildLogParser,
    CommandKind,
    DescribeParser,
    IssueType,
    ShowDependenciesParser,
)

DESCRIBE_OUTPUT = """
Name: Sample
Manifest display name: Sample
Path: /tmp/Sample
Tools version: 5.9
Dependencies:
    Name: swift-composable-architecture
Targets:
    Name: Sample
"""

TREE_OUTPUT = textwrap.dedent(
    """
    .
    ├── swift-composable-architecture<https://github.com/pointfreeco/swift-composable-architecture@1.15.0>
    │   ├── swift-case-paths<https://github.com/pointfreeco/swift-case-paths@1.5.4>
    │   │   └── xctest-dynamic-overlay<https://github.com/pointfreeco/xctest-dynamic-overlay@1.2.2>
    │   └── xctest-dynamic-overlay<https://github.com/pointfreeco/xctest-dynamic-overlay@1.2.2>
    └── swift-dependencies<https://github.com/pointfreeco/swift-dependencies@1.4.0>
    """
).lstrip("\n")


def test_describe_extracts_first_name() -> None:
    result = DescribeParser().parse(DESCRIBE_OUTPUT)
    assert result.command is CommandKind.DESCRIBE
    assert result.success
    assert result.package_name == "Sample"
    assert result.issues == []


def test_describe_collects_error_lines() -> None:
    result = DescribeParser().parse("error: manifest parse error\nsomething else\n")
    assert not result.success
    assert [(issue.type, issue.message) for issue in result.issues] == [
        (IssueType.SYNTAX_ERROR, "error: manifest parse error")
    ]


def test_describe_with_target_filter_explains_limitation() -> None:
    result = DescribeParser().parse(DESCRIBE_OUTPUT, target_filter="Sample")
    assert result.success
    assert result.targets.count == 0
    assert result.targets.filtered_target == "Sample"
    assert result.dependencies.count == 0
    assert result.issues[0].severity is Severity.INFO
    assert result.issues[0].target == "Sample"


def test_show_dependencies_text_tree() -> None:
    result = ShowDependenciesParser().parse(TREE_OUTPUT)
    assert result.command is CommandKind.SHOW_DEPENDENCIES
    assert result.success
    names = [dep.name for dep in result.dependencies.external]
    assert names == [
        "swift-composable-architecture",
        "swift-case-paths",
        "xctest-dynamic-overlay",
        "swift-dependencies",
    ]
    assert result.dependencies.external[1].version == "1.5.4"
    assert result.dependencies.external[1].url == "https://github.com/pointfreeco/swift-case-paths"
    assert result.dependencies.max_depth == 3
    assert not result.dependencies.circular_imports


def test_show_dependencies_json_graph_with_cycle() -> None:
    document = {
        "identity": "app",
        "name": "App",
        "url": "/tmp/App",
        "version": "unspecified",
        "dependencies": [
            {
                "identity": "lib-a",
                "name": "LibA",
                "url": "https://example.com/lib-a",
                "version": "1.0.0",
                "dependencies": [
                    {
                        "identity": "lib-b",
                        "version": "2.0.0",
                        "dependencies": [{"identity": "lib-a", "dependencies": []}],
                    }
                ],
            }
        ],
    }
    result = ShowDependenciesParser().parse(json.dumps(document))
    assert result.package_name == "App"
    assert [dep.name for dep in result.dependencies.external] == ["lib-a", "lib-b"]
    assert result.dependencies.max_depth == 2
    assert result.dependencies.circular_imports
    assert not result.success
    assert result.issues[0].type is IssueType.DEPENDENCY


def test_build_log_collects_located_diagnostics() -> None:
    log = textwrap.dedent(
        """
        Building for debugging...
        /work/Sources/Feature/Feature.swift:12:5: error: cannot find 'Foo' in scope
        /work/Sources/Feature/Feature.swift:12:5: error: cannot find 'Foo' in scope
        /work/Sources/Other/View.swift:3:1: warning: variable 'x' was never used
        /work/Sources/Other/View.swift:4: note: did you mean 'y'?
        error: fatalError
        """
    )
    result = BuildLogParser().parse(log)
    assert result.command is CommandKind.BUILD
    assert not result.success
    assert [(issue.severity, issue.file, issue.line) for issue in result.issues] == [
        (Severity.ERROR, "Feature.swift", 12),
        (Severity.WARNING, "View.swift", 3),
        (Severity.INFO, "View.swift", 4),
        (Severity.ERROR, None, None),
    ]
    assert result.error_count == 2
    assert result.warning_count == 1


def test_build_log_target_filter_uses_path_components() -> None:
    log = (
        "/work/Sources/Feature/Feature.swift:1:1: warning: first\n"
        "/work/Sources/FeatureKit/Kit.swift:2:1: warning: second\n"
    )
    result = BuildLogParser().parse(log, target_filter="Feature")
    assert [issue.message for issue in result.issues] == ["first"]
    assert result.success
