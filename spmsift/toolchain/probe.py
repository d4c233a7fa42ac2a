"""Comparative builds used to isolate macro-validation failures."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..logging import get_logger
from .runner import SwiftToolchain

SKIP_MACRO_VALIDATION_FLAGS = ("-Xswiftc", "-skipMacroValidation")


@dataclass(frozen=True)
class BuildComparison:
    """Head of the build output with and without macro validation."""

    normal_output: str
    skip_validation_output: str


class MacroBuildProbe:
    """Builds a package twice, once with ``-skipMacroValidation``.

    Each build is bounded by ``timeout`` seconds and only the first
    ``max_lines`` lines of combined output are kept.
    """

    def __init__(
        self,
        toolchain: SwiftToolchain | None = None,
        *,
        timeout: float = 60.0,
        max_lines: int = 50,
    ) -> None:
        self.toolchain = toolchain or SwiftToolchain()
        self.timeout = timeout
        self.max_lines = max_lines
        self.logger = get_logger("toolchain.probe")

    def compare_builds(self, package_dir: Path) -> BuildComparison:
        self.logger.info("Running comparative builds in %s", package_dir)
        normal = self.toolchain.run_build((), package_dir, timeout=self.timeout)
        skipped = self.toolchain.run_build(
            SKIP_MACRO_VALIDATION_FLAGS, package_dir, timeout=self.timeout
        )
        return BuildComparison(
            normal_output=self._head(normal.output),
            skip_validation_output=self._head(skipped.output),
        )

    def _head(self, output: str) -> str:
        return "\n".join(output.splitlines()[: self.max_lines])


__all__ = ["BuildComparison", "MacroBuildProbe", "SKIP_MACRO_VALIDATION_FLAGS"]
