"""Invocation of the ``swift package`` toolchain."""

from __future__ import annotations

import subprocess
import time
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

from ..logging import get_logger
from ..models import CommandResult

Runner = Callable[..., CommandResult]


class ToolchainError(RuntimeError):
    """Raised when the toolchain executable cannot be started."""


class SwiftToolchain:
    """Runs ``<executable> package <subcommand>`` inside a package root."""

    def __init__(self, executable: str = "swift", runner: Runner | None = None) -> None:
        self.executable = executable
        self._runner = runner or self._default_runner
        self.logger = get_logger("toolchain")

    def run_package(
        self,
        arguments: Sequence[str],
        cwd: Path,
        *,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        args = [self.executable, "package", *arguments]
        self.logger.debug("Running %s in %s", " ".join(args), cwd)
        result = self._run(args, cwd=Path(cwd), timeout=timeout, merge_stderr=False)
        if not result.success:
            self.logger.debug("%s exited unsuccessfully: %s", " ".join(args), result.error or "")
        return result

    def run_build(
        self,
        extra_arguments: Sequence[str],
        cwd: Path,
        *,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        """Run ``<executable> build`` with stderr folded into stdout."""
        args = [self.executable, "build", *extra_arguments]
        self.logger.debug("Running %s in %s", " ".join(args), cwd)
        return self._run(args, cwd=Path(cwd), timeout=timeout, merge_stderr=True)

    def _run(
        self,
        args: Iterable[str],
        *,
        cwd: Path,
        timeout: Optional[float],
        merge_stderr: bool,
    ) -> CommandResult:
        return self._runner(args, cwd=cwd, timeout=timeout, merge_stderr=merge_stderr)

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        timeout: Optional[float] = None,
        merge_stderr: bool = False,
    ) -> CommandResult:
        argv = list(args)
        started = time.monotonic()
        try:
            completed = subprocess.run(
                argv,
                cwd=str(cwd),
                check=False,
                text=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
                timeout=timeout,
            )
        except FileNotFoundError as exc:
            raise ToolchainError(f"Toolchain executable not found: {argv[0]}") from exc
        except subprocess.TimeoutExpired as exc:
            # Partial output is treated as the complete output.
            return CommandResult(
                success=False,
                output=_decode(exc.stdout),
                error=f"timed out after {timeout:g}s" if timeout else "timed out",
                duration=time.monotonic() - started,
            )

        error = (completed.stderr or "").strip() if not merge_stderr else ""
        return CommandResult(
            success=completed.returncode == 0,
            output=completed.stdout or "",
            error=error or None,
            duration=time.monotonic() - started,
        )


def _decode(value: object) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        return value
    return ""


__all__ = ["Runner", "SwiftToolchain", "ToolchainError"]
