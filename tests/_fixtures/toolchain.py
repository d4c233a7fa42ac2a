"""Scripted toolchain doubles so tests never spawn ``swift``."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Union

from spmsift.analyzers import PackageContext
from spmsift.config import load_config
from spmsift.models import CommandResult
from spmsift.toolchain import MacroBuildProbe, SwiftToolchain

Response = Union[CommandResult, BaseException]


class ScriptedRunner:
    """Runner that answers by subcommand, e.g. ``"package dump-package"``.

    Unscripted commands fail with an empty output.
    """

    def __init__(self, responses: Optional[Mapping[str, Response]] = None) -> None:
        self.responses = dict(responses or {})
        self.calls: List[dict] = []

    def __call__(
        self,
        args: Iterable[str],
        *,
        cwd: Path,
        timeout: Optional[float] = None,
        merge_stderr: bool = False,
    ) -> CommandResult:
        argv = list(args)
        key = " ".join(argv[1:])
        self.calls.append({"argv": argv, "cwd": cwd, "timeout": timeout, "merge_stderr": merge_stderr})
        response = self.responses.get(key, CommandResult(success=False, output="", error="unscripted"))
        if isinstance(response, BaseException):
            raise response
        return response

    @property
    def commands(self) -> List[str]:
        return [" ".join(call["argv"][1:]) for call in self.calls]


def ok(output: str = "") -> CommandResult:
    return CommandResult(success=True, output=output, duration=0.01)


def failed(output: str = "", error: str = "exit status 1") -> CommandResult:
    return CommandResult(success=False, output=output, error=error, duration=0.01)


def build_context(
    root: Path,
    runner: Optional[ScriptedRunner] = None,
    *,
    flag_branch_deps: bool = False,
) -> PackageContext:
    toolchain = SwiftToolchain(runner=runner or ScriptedRunner())
    return PackageContext(
        root=root,
        config=load_config(root),
        toolchain=toolchain,
        probe=MacroBuildProbe(toolchain),
        flag_branch_deps=flag_branch_deps,
    )


__all__ = ["ScriptedRunner", "build_context", "failed", "ok"]
