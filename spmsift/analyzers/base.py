"""Base classes for validation analyzers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List

from ..config import SiftConfig
from ..models import Diagnostic
from ..rules import RuleTables, load_rule_tables
from ..scanning import find_swift_files
from ..toolchain import MacroBuildProbe, SwiftToolchain

MANIFEST_FILENAME = "Package.swift"


@dataclass
class PackageContext:
    """Everything an analyzer may consult for one package."""

    root: Path
    config: SiftConfig
    toolchain: SwiftToolchain
    probe: MacroBuildProbe
    tables: RuleTables = field(default_factory=load_rule_tables)
    flag_branch_deps: bool = False
    _swift_files: List[Path] | None = field(default=None, init=False, repr=False)

    @property
    def manifest_path(self) -> Path:
        return self.root / MANIFEST_FILENAME

    def swift_files(self) -> List[Path]:
        if self._swift_files is None:
            self._swift_files = find_swift_files(self.root, self.config.exclude_paths)
        return self._swift_files


class Analyzer(ABC):
    """Contract for analyzers that emit diagnostics for a package."""

    name: str = "analyzer"

    @abstractmethod
    def supports(self, context: PackageContext) -> bool:
        """Return True when this analyzer should run for the package."""

    @abstractmethod
    def analyze(self, context: PackageContext) -> Iterable[Diagnostic]:
        """Produce diagnostics for the package."""
