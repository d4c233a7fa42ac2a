"""Composition complexity scoring for reducer bodies and builders.

The thresholds below were derived from observed type-inference blow-ups and
must stay exactly as written.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from ..models import Category, CompositionComplexityResult, Diagnostic, Location, Severity
from ..rules import CompositionVocabulary
from ..scanning.text import closing_brace_count, contains, extract_block, is_blank_or_comment, matches

NESTING_ERROR_LEVEL = 1

IMPLICIT_ERROR_COUNT = 5
IMPLICIT_WARNING_COUNT = 3

SCORE_ERROR = 20
SCORE_HIGH_RISK = 15
SCORE_SLOWDOWN = 8

COMPONENTS_ERROR = 8
COMPONENTS_WARNING = 5

_DEFAULT_VOCABULARY = CompositionVocabulary()


def detect_nesting(
    block: Sequence[str], vocabulary: CompositionVocabulary = _DEFAULT_VOCABULARY
) -> Tuple[int, List[str]]:
    """Return the deepest grouping-token nesting and the lines that exceeded one level."""
    token = vocabulary.grouping_token
    level = 0
    max_level = 0
    open_stack: List[int] = []
    problems: List[str] = []

    for index, line in enumerate(block):
        trimmed = line.strip()
        openings = trimmed.count(token)
        if openings:
            open_stack.extend([index] * openings)
            level += openings
            max_level = max(max_level, level)
            if level > 1:
                problems.append(f"Line {index + 1}: Nested {token.rstrip('(')} at level {level}")

        closings = closing_brace_count(trimmed)
        if closings and open_stack:
            popped = min(closings, len(open_stack))
            del open_stack[-popped:]
            level = max(0, level - popped)

    return max_level, problems


def is_component_line(line: str, vocabulary: CompositionVocabulary = _DEFAULT_VOCABULARY) -> bool:
    trimmed = line.strip()
    if any(contains(trimmed, token) for token in vocabulary.wrapper_tokens):
        return False
    if any(contains(trimmed, literal) for literal in vocabulary.component_literals):
        return True
    return matches(trimmed, vocabulary.component_pattern)


def count_implicit_compositions(
    block: Sequence[str], vocabulary: CompositionVocabulary = _DEFAULT_VOCABULARY
) -> int:
    count = 0
    for line in block:
        trimmed = line.strip()
        if is_blank_or_comment(trimmed) or trimmed.startswith("}"):
            continue
        if any(token in trimmed for token in vocabulary.wrapper_tokens):
            continue
        if is_component_line(trimmed, vocabulary):
            count += 1
    return count


def count_conditional_branches(
    block: Sequence[str], vocabulary: CompositionVocabulary = _DEFAULT_VOCABULARY
) -> int:
    count = 0
    for line in block:
        trimmed = line.strip()
        if is_blank_or_comment(trimmed):
            continue
        if trimmed.startswith(vocabulary.conditional_prefixes) or any(
            marker in trimmed for marker in vocabulary.ternary_markers
        ):
            count += 1
    return count


def count_builder_components(
    block: Sequence[str], vocabulary: CompositionVocabulary = _DEFAULT_VOCABULARY
) -> int:
    excluded = ("}",) + vocabulary.conditional_prefixes + vocabulary.branch_prefixes
    count = 0
    for line in block:
        trimmed = line.strip()
        if is_blank_or_comment(trimmed) or trimmed.startswith(excluded):
            continue
        if is_component_line(trimmed, vocabulary):
            count += 1
    return count


def measure(
    block: Sequence[str], vocabulary: CompositionVocabulary = _DEFAULT_VOCABULARY
) -> CompositionComplexityResult:
    nesting, _ = detect_nesting(block, vocabulary)
    return CompositionComplexityResult(
        nesting_level=nesting,
        implicit_composition_count=count_implicit_compositions(block, vocabulary),
        conditional_branch_count=count_conditional_branches(block, vocabulary),
        reducer_component_count=count_builder_components(block, vocabulary),
    )


def analyze_body(
    lines: Sequence[str],
    start: int,
    *,
    file: str,
    line_number: int,
    vocabulary: CompositionVocabulary = _DEFAULT_VOCABULARY,
) -> List[Diagnostic]:
    """Check a reducer ``body`` block that begins at ``lines[start]``."""
    block = extract_block(lines, start)
    location = Location(file, line_number)
    diagnostics: List[Diagnostic] = []

    nesting, _ = detect_nesting(block, vocabulary)
    if nesting > NESTING_ERROR_LEVEL:
        diagnostics.append(
            Diagnostic(
                severity=Severity.ERROR,
                category=Category.COMPILATION,
                message=(
                    f"CRITICAL: Nested CombineReducers detected (level {nesting}) - "
                    "causes exponential type inference explosion"
                ),
                location=location,
                suggestion=(
                    "Flatten composition by calling @ReducerBuilder functions directly, removing "
                    "nested CombineReducers calls. Example: var body { group1(); group2() }"
                ),
            )
        )

    implicit = count_implicit_compositions(block, vocabulary)
    if implicit >= IMPLICIT_ERROR_COUNT:
        diagnostics.append(
            Diagnostic(
                severity=Severity.ERROR,
                category=Category.COMPILATION,
                message=(
                    f"Excessive implicit composition: {implicit} reducers in body - "
                    "causes type inference explosion"
                ),
                location=location,
                suggestion="Group related reducers with CombineReducers or restructure with explicit Scope usage",
            )
        )
    elif implicit >= IMPLICIT_WARNING_COUNT:
        diagnostics.append(
            Diagnostic(
                severity=Severity.WARNING,
                category=Category.COMPILATION,
                message=(
                    f"Multiple implicit compositions: {implicit} reducers - "
                    "risk of type inference issues"
                ),
                location=location,
                suggestion="Consider using CombineReducers for clarity and type safety",
            )
        )

    return diagnostics


def analyze_builder(
    lines: Sequence[str],
    start: int,
    *,
    file: str,
    line_number: int,
    vocabulary: CompositionVocabulary = _DEFAULT_VOCABULARY,
) -> List[Diagnostic]:
    """Score a ``@ReducerBuilder`` block that begins at ``lines[start]``."""
    block = extract_block(lines, start)
    location = Location(file, line_number)
    conditionals = count_conditional_branches(block, vocabulary)
    components = count_builder_components(block, vocabulary)
    score = conditionals + 2 * components
    diagnostics: List[Diagnostic] = []

    if score >= SCORE_ERROR:
        diagnostics.append(
            Diagnostic(
                severity=Severity.ERROR,
                category=Category.COMPILATION,
                message=(
                    f"Extremely complex @ReducerBuilder with complexity score {score} - "
                    "definite type inference explosion"
                ),
                location=location,
                suggestion=(
                    "Simplify @ReducerBuilder: reduce conditions, extract complex logic to separate "
                    "properties, or use explicit composition"
                ),
            )
        )
    elif score >= SCORE_HIGH_RISK:
        diagnostics.append(
            Diagnostic(
                severity=Severity.WARNING,
                category=Category.COMPILATION,
                message=(
                    f"Complex @ReducerBuilder with complexity score {score} - "
                    "high risk of type inference issues"
                ),
                location=location,
                suggestion="Consider simplifying @ReducerBuilder or extracting some logic to separate computed properties",
            )
        )
    elif score >= SCORE_SLOWDOWN:
        diagnostics.append(
            Diagnostic(
                severity=Severity.WARNING,
                category=Category.COMPILATION,
                message=f"@ReducerBuilder complexity score {score} - may cause type inference slowdown",
                location=location,
                suggestion="Monitor build times; consider simplifying if compilation becomes slow",
            )
        )

    if components >= COMPONENTS_ERROR:
        diagnostics.append(
            Diagnostic(
                severity=Severity.ERROR,
                category=Category.COMPILATION,
                message=(
                    f"@ReducerBuilder with {components} conditional reducers - "
                    "exponential type inference complexity"
                ),
                location=location,
                suggestion=(
                    "Consider grouping related conditions or using explicit CombineReducers "
                    "instead of @ReducerBuilder"
                ),
            )
        )
    elif components >= COMPONENTS_WARNING:
        diagnostics.append(
            Diagnostic(
                severity=Severity.WARNING,
                category=Category.COMPILATION,
                message=(
                    f"@ReducerBuilder with {components} conditional reducers - "
                    "risk of type inference issues"
                ),
                location=location,
                suggestion="Test compilation performance; consider refactoring if build becomes slow",
            )
        )

    return diagnostics


__all__ = [
    "analyze_body",
    "analyze_builder",
    "count_builder_components",
    "count_conditional_branches",
    "count_implicit_compositions",
    "detect_nesting",
    "is_component_line",
    "measure",
]
