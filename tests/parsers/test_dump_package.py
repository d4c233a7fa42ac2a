"""Tests for the dump-package parser."""

from __future__ import annotations

import json

from spmsift.models import Severity
from spmsift.parsers import CommandKind, DumpPackageParser, IssueType


def _parse(document, target=None):
    text = document if isinstance(document, str) else json.dumps(document)
    return DumpPackageParser().parse(text, target_filter=target)


MULTI_TARGET = {
    "name": "MultiTargetPackage",
    "platforms": {"iOS": "15.0"},
    "targets": [
        {"name": "AppTarget", "type": "executable", "dependencies": ["SwiftUI", "Combine"]},
        {"name": "LibraryTarget", "type": "library", "dependencies": ["Foundation"]},
        {"name": "AppTargetTests", "type": "test", "dependencies": ["AppTarget", "XCTest"]},
    ],
    "dependencies": [
        {"name": "SwiftUI", "url": "https://github.com/apple/swiftui.git", "requirement": {"range": ["15.0.0"]}},
        {"name": "Combine", "url": "https://github.com/apple/combine.git", "requirement": {"range": ["15.0.0"]}},
        {
            "name": "Foundation",
            "url": "https://github.com/apple/foundation.git",
            "requirement": {"range": ["15.0.0"]},
        },
    ],
}


def test_simple_package() -> None:
    result = _parse(
        {
            "name": "TestPackage",
            "platforms": {"iOS": "15.0", "macOS": "12.0"},
            "targets": [{"name": "TestTarget", "type": "executable", "dependencies": []}],
            "dependencies": [],
            "products": [{"name": "test", "type": "executable"}],
        }
    )
    assert result.command is CommandKind.DUMP_PACKAGE
    assert result.success
    assert result.package_name == "TestPackage"
    assert result.targets.count == 1
    assert result.targets.executables == ["TestTarget"]
    assert result.dependencies.count == 0
    assert result.issues == []


def test_dependency_information() -> None:
    result = _parse(
        {
            "name": "TestPackage",
            "targets": [{"name": "TestTarget", "type": "library", "dependencies": ["TCA", "SwiftUI"]}],
            "dependencies": [
                {
                    "name": "swift-composable-architecture",
                    "url": "https://github.com/pointfreeco/swift-composable-architecture",
                    "requirement": {"range": ["1.0.0", "2.0.0"]},
                }
            ],
        }
    )
    assert result.targets.count == 1
    assert result.dependencies.count == 1
    assert result.dependencies.external[0].name == "swift-composable-architecture"
    assert result.dependencies.external[0].version == "1.0.0, 2.0.0"


def test_test_targets_are_detected() -> None:
    result = _parse(
        {
            "name": "TestPackage",
            "targets": [
                {"name": "TestTarget", "type": "executable"},
                {"name": "TestTargetTests", "type": "test"},
            ],
        }
    )
    assert result.targets.count == 2
    assert result.targets.has_test_targets


def test_invalid_json() -> None:
    result = _parse("invalid json")
    assert result.command is CommandKind.DUMP_PACKAGE
    assert not result.success
    assert result.issues[0].type is IssueType.SYNTAX_ERROR
    assert result.issues[0].severity is Severity.ERROR


def test_empty_package_warns_about_targets() -> None:
    result = _parse({"name": "EmptyPackage"})
    assert result.success
    assert result.targets.count == 0
    assert result.dependencies.count == 0
    assert any(issue.type is IssueType.MISSING_TARGET for issue in result.issues)


def test_many_targets_is_a_performance_warning() -> None:
    targets = [{"name": f"T{index}", "type": "regular"} for index in range(21)]
    result = _parse({"name": "Big", "targets": targets})
    assert [(issue.type, issue.message) for issue in result.issues] == [
        (IssueType.PERFORMANCE, "Package has many targets (21)")
    ]


def test_target_filter_keeps_only_referenced_dependencies() -> None:
    result = _parse(MULTI_TARGET, target="AppTarget")
    assert result.success
    assert result.targets.count == 1
    assert result.targets.filtered_target == "AppTarget"
    target = result.targets.targets[0]
    assert (target.name, target.type) == ("AppTarget", "executable")
    assert target.dependencies == ["SwiftUI", "Combine"]
    assert result.targets.executables == ["AppTarget"]
    assert result.dependencies.count == 2
    assert [dep.name for dep in result.dependencies.external] == ["SwiftUI", "Combine"]


def test_target_filter_for_unknown_target_is_empty() -> None:
    result = _parse(
        {
            "name": "TestPackage",
            "targets": [{"name": "ExistingTarget", "type": "executable", "dependencies": []}],
            "dependencies": [],
        },
        target="NonExistentTarget",
    )
    assert result.success
    assert result.targets.count == 0
    assert result.targets.filtered_target == "NonExistentTarget"
    assert result.targets.targets == []
    assert result.dependencies.count == 0
    assert result.issues == []


def test_target_filter_on_test_target() -> None:
    result = _parse(
        {
            "name": "TestPackage",
            "targets": [
                {"name": "MainTarget", "type": "executable", "dependencies": []},
                {"name": "MainTargetTests", "type": "test", "dependencies": ["MainTarget", "XCTest"]},
            ],
            "dependencies": [
                {"name": "XCTest", "url": "https://github.com/apple/xctest.git", "requirement": {"range": ["15.0.0"]}}
            ],
        },
        target="MainTargetTests",
    )
    assert result.targets.count == 1
    assert result.targets.has_test_targets
    assert result.targets.targets[0].dependencies == ["MainTarget", "XCTest"]
    assert [dep.name for dep in result.dependencies.external] == ["XCTest"]


def test_modern_dump_layout() -> None:
    result = _parse(
        {
            "name": "Modern",
            "targets": [
                {
                    "name": "Feature",
                    "type": "regular",
                    "dependencies": [
                        {"product": ["ComposableArchitecture", "swift-composable-architecture", None, None]},
                        {"byName": ["Shared", None]},
                    ],
                }
            ],
            "dependencies": [
                {
                    "sourceControl": [
                        {
                            "identity": "swift-composable-architecture",
                            "location": {"remote": [{"urlString": "https://github.com/pointfreeco/tca"}]},
                            "requirement": {"range": [{"lowerBound": "1.15.0", "upperBound": "2.0.0"}]},
                        }
                    ]
                },
                {"fileSystem": [{"identity": "shared", "path": "/tmp/Shared"}]},
            ],
        }
    )
    assert result.targets.targets[0].dependencies == ["ComposableArchitecture", "Shared"]
    external = result.dependencies.external[0]
    assert external.name == "swift-composable-architecture"
    assert external.url == "https://github.com/pointfreeco/tca"
    assert external.version == "1.15.0..<2.0.0"
    assert result.dependencies.local == ["shared"]
