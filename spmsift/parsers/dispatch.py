"""Detect which ``swift package`` command produced a text and parse it."""

from __future__ import annotations

import json
import time
from typing import Any, Mapping, Optional

from ..analyzers.resolved import classify_pin
from ..logging import get_logger
from ..models import Severity
from .build_log import BuildLogParser
from .describe import DescribeParser
from .dump_package import DumpPackageParser
from .results import (
    CommandKind,
    DependencyAnalysis,
    ExternalDependency,
    IssueType,
    PackageAnalysis,
    PackageIssue,
)
from .show_dependencies import ShowDependenciesParser, looks_like_tree

_logger = get_logger("parsers")

_DESCRIBE_MARKERS = ("package name:", "tools version:", "manifest display name:")


def _load_json(text: str) -> Optional[Any]:
    stripped = text.strip()
    if not stripped.startswith("{"):
        return None
    try:
        return json.loads(stripped)
    except json.JSONDecodeError:
        return None


def detect_kind(text: str) -> CommandKind:
    """Guess the producing command from the shape of ``text``."""
    document = _load_json(text)
    if isinstance(document, Mapping):
        if "pins" in document or isinstance(document.get("object"), Mapping):
            return CommandKind.RESOLVED
        if "identity" in document and "dependencies" in document and "targets" not in document:
            return CommandKind.SHOW_DEPENDENCIES
        return CommandKind.DUMP_PACKAGE
    if text.lstrip().startswith("{"):
        # Malformed JSON is reported by the dump-package parser.
        return CommandKind.DUMP_PACKAGE
    if looks_like_tree(text):
        return CommandKind.SHOW_DEPENDENCIES
    lowered = text.lower()
    if any(line.strip().startswith(_DESCRIBE_MARKERS) for line in lowered.splitlines()):
        return CommandKind.DESCRIBE
    return CommandKind.BUILD


def _pin_version(state: Mapping[str, Any]) -> Optional[str]:
    if isinstance(state.get("version"), str):
        return state["version"]
    if isinstance(state.get("branch"), str):
        return f"branch: {state['branch']}"
    if isinstance(state.get("revision"), str):
        return f"revision: {state['revision'][:7]}"
    return None


def parse_resolved(text: str) -> PackageAnalysis:
    document = _load_json(text)
    pins = []
    if isinstance(document, Mapping):
        pins = document.get("pins")
        if pins is None and isinstance(document.get("object"), Mapping):
            pins = document["object"].get("pins")
    analysis = DependencyAnalysis()
    issues = []
    for raw in pins if isinstance(pins, list) else []:
        if not isinstance(raw, Mapping):
            continue
        pin = classify_pin(raw)
        if pin is None:
            continue
        state = raw.get("state") if isinstance(raw.get("state"), Mapping) else {}
        url = raw.get("location") or raw.get("repositoryURL")
        analysis.external.append(
            ExternalDependency(
                name=pin.identity,
                url=url if isinstance(url, str) else None,
                version=_pin_version(state),
            )
        )
        if pin.flagged:
            issues.append(
                PackageIssue(
                    type=IssueType.DEPENDENCY,
                    severity=Severity.WARNING,
                    message=f"Branch dependency: {pin.display_name}",
                )
            )
    return PackageAnalysis(
        command=CommandKind.RESOLVED,
        success=document is not None,
        dependencies=analysis,
        issues=issues,
    )


_PARSERS = {
    CommandKind.DUMP_PACKAGE: DumpPackageParser(),
    CommandKind.DESCRIBE: DescribeParser(),
    CommandKind.SHOW_DEPENDENCIES: ShowDependenciesParser(),
    CommandKind.BUILD: BuildLogParser(),
}


def parse_output(
    text: str,
    *,
    target_filter: Optional[str] = None,
    include_raw: bool = False,
    kind: Optional[CommandKind] = None,
) -> PackageAnalysis:
    """Parse captured toolchain output into a :class:`PackageAnalysis`."""
    started = time.perf_counter()
    kind = kind or detect_kind(text)
    _logger.debug("Parsing input as %s output", kind.value)
    if kind is CommandKind.RESOLVED:
        result = parse_resolved(text)
    else:
        result = _PARSERS[kind].parse(text, target_filter=target_filter)
    result.parse_time = time.perf_counter() - started
    if include_raw:
        result.raw = text
    return result
