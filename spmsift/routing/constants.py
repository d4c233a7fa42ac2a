"""Category table for the documentation reading router."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass(frozen=True)
class RouteCategory:
    name: str
    keywords: tuple[str, ...]
    primary: str
    sections: str
    time_budget: str
    fallback: Optional[str]
    description: str
    guidance: tuple[str, ...] = ()


def _category(
    name: str,
    keywords: Sequence[str],
    primary: str,
    sections: str,
    time_budget: str,
    fallback: Optional[str],
    description: str,
    guidance: Sequence[str] = (),
) -> RouteCategory:
    # Matching is case-insensitive, so "test" and "Test" are one keyword.
    normalized = tuple(dict.fromkeys(keyword.lower() for keyword in keywords))
    return RouteCategory(
        name=name,
        keywords=normalized,
        primary=primary,
        sections=sections,
        time_budget=time_budget,
        fallback=fallback,
        description=description,
        guidance=tuple(guidance),
    )


BUG_FIX_CATEGORY = "bugFix"

ROUTING_TABLE: tuple[RouteCategory, ...] = (
    _category(
        "testing",
        ["test", "Test", "@Test", "#expect", "TestClock", "testing"],
        "QUICK-START.md",
        "Rules 6-7",
        "2 minutes",
        "AGENTS-AGNOSTIC.md lines 75-111",
        "Testing patterns with Swift Testing framework",
        [
            "Use @Test and #expect(), never XCTest",
            "Mark TCA tests @MainActor",
            "Use TestClock() for deterministic time",
        ],
    ),
    _category(
        "tcaReducer",
        ["reducer", "Reducer", "@Reducer", "State", "Action", "reduce"],
        "QUICK-START.md",
        "Rules 2-4",
        "3 minutes",
        "AGENTS-TCA-PATTERNS.md specific pattern",
        "TCA reducer patterns and state management",
        [
            "Check for deprecated WithViewStore",
            "Verify @Shared patterns (single owner)",
            "Use modern @Reducer macro syntax",
        ],
    ),
    _category(
        "visionOS",
        ["visionOS", "RealityView", "PresentationComponent", "Entity", "Model3D"],
        "QUICK-START.md",
        "Rule 9",
        "2 minutes",
        "PLATFORM-VISIONOS.md + DISCOVERY-4",
        "visionOS entity patterns and 3D components",
    ),
    _category(
        "dependencies",
        ["dependency", "@Dependency", "@DependencyClient", "Date()", "UUID()"],
        "QUICK-START.md",
        "Rule 5",
        "2 minutes",
        "AGENTS-DECISION-TREES.md Tree 2",
        "Dependency injection patterns",
    ),
    _category(
        "accessControl",
        ["access control", "public", "internal", "private", "fileprivate"],
        "QUICK-START.md",
        "Rule 8 + DISCOVERY-5",
        "5 minutes",
        "AGENTS-AGNOSTIC.md lines 443-598",
        "Access control and public API boundaries",
        [
            "Trace transitive dependencies when making public",
            "Check cascade failures before assuming type errors",
        ],
    ),
    _category(
        "architecture",
        ["architecture", "pattern", "design", "should I use", "which approach"],
        "AGENTS-DECISION-TREES.md",
        "relevant tree",
        "5 minutes",
        "AGENTS-TASK-SCOPE.md",
        "Architecture decision guidance",
    ),
    _category(
        BUG_FIX_CATEGORY,
        ["bug", "error", "fix", "broken", "not working", "compile error"],
        "Search CaseStudies/",
        "search by symptom",
        "2 minutes",
        "Read matching DISCOVERY",
        "Bug resolution and error fixing",
        [
            "Search case studies by symptom first",
            "Check compilation before pattern analysis",
        ],
    ),
    _category(
        "navigation",
        ["navigation", "sheet", "fullScreenCover", "popover", "NavigationStack"],
        "AGENTS-TCA-PATTERNS.md",
        "Pattern 2 (optional state)",
        "5 minutes",
        None,
        "SwiftUI navigation patterns with TCA",
        [
            "Optional state = .sheet(item:) + .scope()",
            "Conditional UI = if/else in view",
            "NEVER use .sheet() for toolbar items",
        ],
    ),
    _category(
        "concurrency",
        ["Task", "async", "await", "MainActor", "concurrent"],
        "AGENTS-AGNOSTIC.md",
        "lines 24-29 + 162-313",
        "5 minutes",
        None,
        "Concurrency patterns and main actor usage",
    ),
    _category(
        "nestedReducers",
        ["nested reducer", "child feature", "extract reducer", "Scope"],
        "DISCOVERY-14-NESTED-REDUCER-GOTCHAS.md",
        "entire document",
        "5 minutes",
        None,
        "Nested @Reducer patterns and gotchas",
    ),
    _category(
        "logging",
        ["print", "oslog", "Logger", "log", "debug"],
        "DISCOVERY-15-PRINT-OSLOG-PATTERNS.md",
        "appropriate section",
        "3 minutes",
        None,
        "Print vs OSLog logging patterns",
    ),
)

DEFAULT_PLAN = "QUICK-START.md entire document (5 minutes max)"

CASE_STUDY_GLOB = "DISCOVERY-*.md"
CASE_STUDY_MIN_WORD = 4

VERIFICATION_CHECKLIST: tuple[str, ...] = (
    "Code compiles (swiftc -typecheck)",
    "Follows Smith patterns (no red flags)",
    "Within reading budget",
    "Passes relevant verification checklist",
)


__all__ = [
    "BUG_FIX_CATEGORY",
    "CASE_STUDY_GLOB",
    "CASE_STUDY_MIN_WORD",
    "DEFAULT_PLAN",
    "ROUTING_TABLE",
    "RouteCategory",
    "VERIFICATION_CHECKLIST",
]
