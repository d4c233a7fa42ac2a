"""Toolchain collaborators: ``swift package`` runner and build probe."""

from .probe import BuildComparison, MacroBuildProbe
from .runner import SwiftToolchain, ToolchainError

__all__ = ["BuildComparison", "MacroBuildProbe", "SwiftToolchain", "ToolchainError"]
