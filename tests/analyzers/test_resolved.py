"""Tests for Package.resolved analysis."""

from __future__ import annotations

import json

import pytest

from spmsift.analyzers.resolved import (
    ResolvedAnalyzer,
    analyze_resolved_text,
    classify_pin,
    collect_resolved,
    find_resolved_files,
    resolved_diagnostics,
)
from spmsift.models import PinForm, ResolvedSummary, Severity
from tests._fixtures.package_builder import branch_pin, revision_pin, version_pin
from tests._fixtures.toolchain import build_context


def test_classify_pin_forms() -> None:
    assert classify_pin(branch_pin("swift-sharing")).form is PinForm.BRANCH
    assert classify_pin(branch_pin("swift-sharing")).branch == "main"
    assert classify_pin(revision_pin("swift-nav")).form is PinForm.REVISION_ONLY
    assert classify_pin(version_pin("swift-tca")).form is PinForm.VERSION_PINNED
    assert classify_pin({"identity": "bare"}).form is PinForm.VERSION_PINNED


def test_classify_pin_treats_null_fields_as_absent() -> None:
    pin = {"identity": "x", "state": {"revision": "abc", "branch": None, "version": None}}
    assert classify_pin(pin).form is PinForm.REVISION_ONLY


def test_classify_pin_uses_v1_package_name_and_placeholder() -> None:
    assert classify_pin({"package": "Legacy", "state": {"branch": "dev"}}).identity == "Legacy"
    assert classify_pin({"state": {"branch": "dev"}}).identity == "<unknown>"


def test_analyze_resolved_text_counts_flagged_pins() -> None:
    document = json.dumps(
        {"pins": [branch_pin("a"), version_pin("b"), revision_pin("c")], "version": 2}
    )
    summary = analyze_resolved_text(document)
    assert summary.total == 3
    assert summary.flagged == 2
    assert summary.flagged_identities == ("a", "c (revision-only)")


def test_analyze_resolved_text_supports_v1_layout() -> None:
    document = json.dumps(
        {
            "object": {
                "pins": [
                    {"package": "Old", "repositoryURL": "https://x", "state": {"branch": "main", "revision": "1"}},
                ]
            },
            "version": 1,
        }
    )
    summary = analyze_resolved_text(document)
    assert (summary.total, summary.flagged) == (1, 1)


def test_analyze_resolved_text_tolerates_garbage() -> None:
    assert analyze_resolved_text("not json") == ResolvedSummary()
    assert analyze_resolved_text("[1, 2]") == ResolvedSummary()
    assert analyze_resolved_text('{"pins": "nope"}') == ResolvedSummary()


def test_find_resolved_files_checks_every_candidate(package_builder) -> None:
    package_builder.resolved([version_pin("a")])
    package_builder.resolved([branch_pin("b")], ".build/Package.resolved")
    package_builder.resolved(
        [branch_pin("c")], "App.xcodeproj/project.xcworkspace/xcshareddata/swiftpm/Package.resolved"
    )
    root = package_builder.path()
    found = [path.relative_to(root).as_posix() for path in find_resolved_files(root)]
    assert found == [
        "Package.resolved",
        ".build/Package.resolved",
        "App.xcodeproj/project.xcworkspace/xcshareddata/swiftpm/Package.resolved",
    ]
    summary, files = collect_resolved(root)
    assert len(files) == 3
    assert (summary.total, summary.flagged) == (3, 2)


def test_resolved_diagnostics_messages() -> None:
    missing = resolved_diagnostics(ResolvedSummary(), found=False, flag_branches=True)
    assert [item.message for item in missing] == ["No Package.resolved found"]

    clean = resolved_diagnostics(ResolvedSummary(total=2), found=True, flag_branches=True)
    assert [item.message for item in clean] == ["All dependencies are properly versioned"]

    summary = ResolvedSummary(total=3, flagged=2, flagged_identities=("a", "a"))
    noted = resolved_diagnostics(summary, found=True, flag_branches=False)
    assert [(item.severity, item.message) for item in noted] == [
        (Severity.INFO, "Found 2 branch dependencies")
    ]

    flagged = resolved_diagnostics(summary, found=True, flag_branches=True)
    assert [(item.severity, item.message) for item in flagged] == [
        (Severity.WARNING, "Found 2 branch dependencies (anti-pattern)"),
        (Severity.INFO, "Branch dependency: a"),
    ]


def test_resolved_analyzer_uses_context_flag(package_builder) -> None:
    package_builder.manifest()
    package_builder.resolved([branch_pin("swift-sharing"), version_pin("swift-tca")])
    root = package_builder.path()

    analyzer = ResolvedAnalyzer()
    flagged = list(analyzer.analyze(build_context(root, flag_branch_deps=True)))
    assert flagged[0].message == "Found 1 branch dependencies (anti-pattern)"
    assert flagged[1].message == "Branch dependency: swift-sharing"

    quiet = list(analyzer.analyze(build_context(root)))
    assert [item.severity for item in quiet] == [Severity.INFO]


@pytest.mark.parametrize("flag_branches", [True, False])
def test_zero_pins_produce_no_anti_pattern(flag_branches: bool) -> None:
    summary = analyze_resolved_text('{"pins": [], "version": 2}')
    assert (summary.total, summary.flagged) == (0, 0)

    diagnostics = resolved_diagnostics(summary, found=True, flag_branches=flag_branches)
    assert [(item.severity, item.message) for item in diagnostics] == [
        (Severity.INFO, "All dependencies are properly versioned")
    ]
