"""Package analyzers and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Iterable, List, Sequence, Set

from ..logging import get_logger
from .base import MANIFEST_FILENAME, Analyzer, PackageContext
from .dependencies import DependencyResolutionAnalyzer
from .macros import MacroAnalyzer
from .manifest import ManifestAnalyzer
from .resolved import ResolvedAnalyzer
from .source import SourcePatternAnalyzer

_ENTRY_POINT_GROUP = "spmsift.analyzers"

_logger = get_logger("analyzers")

# Order matters: diagnostics are reported in this order.
_BUILTIN_FACTORIES: dict[str, Callable[[], Analyzer]] = {
    "manifest": ManifestAnalyzer,
    "dependencies": DependencyResolutionAnalyzer,
    "resolved": ResolvedAnalyzer,
    "macros": MacroAnalyzer,
    "tca": SourcePatternAnalyzer,
}


def discover_analyzers(enabled: Sequence[str] | None = None) -> List[Analyzer]:
    """Return instantiated analyzers, honoring optional enabled names."""

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    analyzers: List[Analyzer] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], Analyzer]) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, Analyzer):
            raise TypeError(f"Analyzer factory for '{name}' did not return an Analyzer instance")
        analyzers.append(instance)
        seen.add(key)
        if enabled_set is not None:
            enabled_set.discard(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        name = entry.name
        key = name.lower()
        if key in seen or (enabled_set is not None and key not in enabled_set):
            continue
        try:
            plugin = _coerce_analyzer(entry.load())
        except Exception as exc:
            _logger.error("Skipping analyzer plugin '%s': %s", name, exc)
            if enabled_set is not None:
                enabled_set.discard(key)
            continue

        _add(name, lambda plugin=plugin: plugin)

    if enabled_set:
        missing = ", ".join(sorted(enabled_set))
        raise ValueError(f"Unknown analyzers requested: {missing}")

    return analyzers


def _coerce_analyzer(obj: object) -> Analyzer:
    if isinstance(obj, Analyzer):
        return obj
    if isinstance(obj, type) and issubclass(obj, Analyzer):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, Analyzer):
            return instance
    raise TypeError("Analyzer entry point must be an Analyzer subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    entry_points = metadata.entry_points()
    if hasattr(entry_points, "select"):
        return entry_points.select(group=_ENTRY_POINT_GROUP)  # type: ignore[return-value]
    return entry_points.get(_ENTRY_POINT_GROUP, [])  # type: ignore[return-value]


__all__ = [
    "Analyzer",
    "MANIFEST_FILENAME",
    "PackageContext",
    "discover_analyzers",
]
