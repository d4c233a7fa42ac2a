"""Declarative pattern rule tables loaded from YAML."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, List, Mapping, Optional, Pattern, Sequence, Tuple

import yaml

from ..config import ConfigError
from ..logging import get_logger
from ..models import Severity, severity_from_code

DEFAULT_RULES_PATH = Path(__file__).with_name("default_rules.yml")
DEFAULT_CONTEXT_MARKER = ".sheet("

_logger = get_logger("rules")


class RuleKind(str, Enum):
    DEPRECATED = "deprecated"
    ANTI_PATTERN = "anti-pattern"
    REQUIRED = "required"
    CONTEXTUAL = "contextual"


@dataclass(frozen=True)
class PatternRule:
    """A regex rule with its message, optional reference and severity.

    Required rules carry no severity; they are informational praise.
    """

    pattern: str
    message: str
    kind: RuleKind
    reference: Optional[str] = None
    severity: Optional[Severity] = None
    compiled: Optional[Pattern[str]] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.compiled is None:
            object.__setattr__(self, "compiled", re.compile(self.pattern))

    def search(self, text: str) -> bool:
        return self.compiled.search(text) is not None  # type: ignore[union-attr]


@dataclass(frozen=True)
class ContextGate:
    """Rules that only run when ``marker`` occurs somewhere in the file."""

    marker: str
    rules: Tuple[PatternRule, ...]

    def applies_to(self, text: str) -> bool:
        return self.marker in text


@dataclass(frozen=True)
class CompositionVocabulary:
    """Tokens used by the composition complexity analyzer."""

    body_trigger: str = "var body: some ReducerOf<Self>"
    builder_trigger: str = "@ReducerBuilder<"
    grouping_token: str = "CombineReducers("
    wrapper_tokens: Tuple[str, ...] = ("CombineReducers(", "Scope(")
    component_literals: Tuple[str, ...] = (
        "Reduce(",
        "BindingReducer(",
        "IfLetReducer(",
        "ForEachReducer(",
        "WhileReducer(",
        "OverrideReducer(",
    )
    component_pattern: Pattern[str] = re.compile(r"^\w+Feature\(\)|^\w+Reducer\(\)")
    conditional_prefixes: Tuple[str, ...] = ("if ", "if(", "guard ", "guard(", "switch ")
    ternary_markers: Tuple[str, ...] = (" ? ", " : ")
    branch_prefixes: Tuple[str, ...] = ("else", "case ", "default:")


@dataclass(frozen=True)
class RuleTables:
    """Immutable, ordered rule tables consumed by the evaluator."""

    deprecated: Tuple[PatternRule, ...] = ()
    anti_patterns: Tuple[PatternRule, ...] = ()
    required: Tuple[PatternRule, ...] = ()
    contextual: Tuple[ContextGate, ...] = ()
    composition: CompositionVocabulary = field(default_factory=CompositionVocabulary)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RuleTables":
        """Build tables from a parsed rules document, dropping invalid rules."""
        deprecated = _build_rules(data.get("deprecated"), RuleKind.DEPRECATED)
        anti_patterns = _build_rules(data.get("anti_patterns"), RuleKind.ANTI_PATTERN)
        required = _build_rules(data.get("required"), RuleKind.REQUIRED)

        gates: List[ContextGate] = []
        for entry in _as_list(data.get("contextual")):
            if not isinstance(entry, Mapping):
                continue
            marker = entry.get("marker")
            if not isinstance(marker, str) or not marker:
                marker = DEFAULT_CONTEXT_MARKER
            rules = _build_rules(entry.get("rules"), RuleKind.CONTEXTUAL)
            if rules:
                gates.append(ContextGate(marker=marker, rules=rules))

        composition_data = data.get("composition")
        composition = (
            _build_vocabulary(composition_data)
            if isinstance(composition_data, Mapping)
            else CompositionVocabulary()
        )

        return cls(
            deprecated=deprecated,
            anti_patterns=anti_patterns,
            required=required,
            contextual=tuple(gates),
            composition=composition,
        )

    def __len__(self) -> int:
        return (
            len(self.deprecated)
            + len(self.anti_patterns)
            + len(self.required)
            + sum(len(gate.rules) for gate in self.contextual)
        )


def load_rule_tables(path: Path | None = None) -> RuleTables:
    """Load rule tables from ``path`` or the bundled defaults.

    The bundled tables are parsed once per process.
    """
    if path is None:
        return _default_tables()
    return RuleTables.from_mapping(_read_rules(Path(path)))


@lru_cache(maxsize=1)
def _default_tables() -> RuleTables:
    return RuleTables.from_mapping(_read_rules(DEFAULT_RULES_PATH))


def _read_rules(path: Path) -> Mapping[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read rule file {path}: {exc}") from exc
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse rule file {path.name}: {exc}") from exc
    if not isinstance(data, Mapping):
        raise ConfigError(f"Rule file {path.name} must contain a mapping at the root")
    return data


def _build_rules(entries: Any, kind: RuleKind) -> Tuple[PatternRule, ...]:
    rules: List[PatternRule] = []
    for entry in _as_list(entries):
        rule = _build_rule(entry, kind)
        if rule is not None:
            rules.append(rule)
    return tuple(rules)


def _build_rule(entry: Any, kind: RuleKind) -> Optional[PatternRule]:
    if not isinstance(entry, Mapping):
        _logger.warning("Ignoring %s rule that is not a mapping: %r", kind.value, entry)
        return None
    pattern = entry.get("pattern")
    message = entry.get("message")
    if not isinstance(pattern, str) or not pattern or not isinstance(message, str):
        _logger.warning("Ignoring %s rule without pattern/message: %r", kind.value, entry)
        return None
    try:
        compiled = re.compile(pattern)
    except re.error as exc:
        _logger.warning("Dropping %s rule with invalid pattern %r: %s", kind.value, pattern, exc)
        return None

    reference = entry.get("reference")
    if kind is RuleKind.DEPRECATED:
        severity: Optional[Severity] = Severity.ERROR
    elif kind is RuleKind.REQUIRED:
        severity = None
    else:
        severity = severity_from_code(entry.get("severity", "error"))

    return PatternRule(
        pattern=pattern,
        message=message,
        kind=kind,
        reference=reference if isinstance(reference, str) else None,
        severity=severity,
        compiled=compiled,
    )


def _build_vocabulary(data: Mapping[str, Any]) -> CompositionVocabulary:
    defaults = CompositionVocabulary()
    component_pattern = defaults.component_pattern
    raw_pattern = data.get("component_pattern")
    if isinstance(raw_pattern, str) and raw_pattern:
        try:
            component_pattern = re.compile(raw_pattern)
        except re.error as exc:
            _logger.warning("Keeping default component pattern; %r is invalid: %s", raw_pattern, exc)

    return CompositionVocabulary(
        body_trigger=_as_text(data.get("body_trigger"), defaults.body_trigger),
        builder_trigger=_as_text(data.get("builder_trigger"), defaults.builder_trigger),
        grouping_token=_as_text(data.get("grouping_token"), defaults.grouping_token),
        wrapper_tokens=_as_tokens(data.get("wrapper_tokens"), defaults.wrapper_tokens),
        component_literals=_as_tokens(data.get("component_literals"), defaults.component_literals),
        component_pattern=component_pattern,
        conditional_prefixes=_as_tokens(data.get("conditional_prefixes"), defaults.conditional_prefixes),
        ternary_markers=_as_tokens(data.get("ternary_markers"), defaults.ternary_markers),
        branch_prefixes=_as_tokens(data.get("branch_prefixes"), defaults.branch_prefixes),
    )


def _as_list(value: Any) -> Sequence[Any]:
    return value if isinstance(value, list) else []


def _as_text(value: Any, default: str) -> str:
    return value if isinstance(value, str) and value else default


def _as_tokens(value: Any, default: Tuple[str, ...]) -> Tuple[str, ...]:
    if not isinstance(value, list):
        return default
    tokens = tuple(item for item in value if isinstance(item, str) and item)
    return tokens or default
