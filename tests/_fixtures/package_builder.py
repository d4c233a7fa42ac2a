"""Helper utilities for constructing temporary Swift packages in tests."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any, Mapping, Sequence

DEFAULT_MANIFEST = """
// swift-tools-version: 5.9
import PackageDescription

let package = Package(
    name: "Sample",
    platforms: [.iOS(.v17)],
    targets: [
        .target(name: "Sample"),
        .testTarget(name: "SampleTests", dependencies: ["Sample"]),
    ]
)
"""


class PackageBuilder:
    """Utility for writing files into a throwaway Swift package."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "package"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the package."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def manifest(self, content: str = DEFAULT_MANIFEST) -> Path:
        self.write({"Package.swift": content})
        return self.root / "Package.swift"

    def resolved(self, pins: Sequence[Mapping[str, Any]], relative: str = "Package.resolved") -> Path:
        """Write a version 2 Package.resolved holding ``pins``."""
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps({"pins": list(pins), "version": 2}, indent=2), encoding="utf-8")
        return path

    def path(self) -> Path:
        """Return the package root path."""
        return self.root


def branch_pin(identity: str, branch: str = "main") -> dict:
    return {
        "identity": identity,
        "kind": "remoteSourceControl",
        "location": f"https://github.com/example/{identity}",
        "state": {"branch": branch, "revision": "0123456789abcdef"},
    }


def version_pin(identity: str, version: str = "1.0.0") -> dict:
    return {
        "identity": identity,
        "kind": "remoteSourceControl",
        "location": f"https://github.com/example/{identity}",
        "state": {"revision": "fedcba9876543210", "version": version},
    }


def revision_pin(identity: str) -> dict:
    return {
        "identity": identity,
        "kind": "remoteSourceControl",
        "location": f"https://github.com/example/{identity}",
        "state": {"revision": "abcdef0123456789"},
    }


__all__ = ["DEFAULT_MANIFEST", "PackageBuilder", "branch_pin", "revision_pin", "version_pin"]
