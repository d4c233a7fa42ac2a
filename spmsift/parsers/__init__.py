"""Parsers for ``swift package`` command output."""

from .build_log import BuildLogParser
from .describe import DescribeParser
from .dispatch import detect_kind, parse_output, parse_resolved
from .dump_package import DumpPackageParser
from .results import (
    CommandKind,
    DependencyAnalysis,
    ExternalDependency,
    IssueType,
    PackageAnalysis,
    PackageIssue,
    TargetAnalysis,
    TargetInfo,
)
from .show_dependencies import ShowDependenciesParser

__all__ = [
    "BuildLogParser",
    "CommandKind",
    "DependencyAnalysis",
    "DescribeParser",
    "DumpPackageParser",
    "ExternalDependency",
    "IssueType",
    "PackageAnalysis",
    "PackageIssue",
    "ShowDependenciesParser",
    "TargetAnalysis",
    "TargetInfo",
    "detect_kind",
    "parse_output",
    "parse_resolved",
]
