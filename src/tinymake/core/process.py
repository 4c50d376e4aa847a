from __future__ import annotations

import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from .logging import log_event

if TYPE_CHECKING:
    from .context import RunContext


@dataclass(frozen=True)
class CommandResult:
    command: str
    code: int
    duration_ms: int

    @property
    def ok(self) -> bool:
        return self.code == 0


CommandRunner = Callable[[str], CommandResult]

# Child stdout goes here while stdout carries a JSON document.
STDERR_FD = 2


def run_shell(
    command: str,
    cwd: Path | None = None,
    shell: str | None = None,
    ctx: RunContext | None = None,
    stdout: int | None = None,
) -> CommandResult:
    """Run one command line under the shell and block until it exits.

    Standard streams are inherited unless `stdout` names another file
    descriptor. There is no timeout.
    """
    started = time.monotonic()
    proc = subprocess.run(command, shell=True, cwd=cwd, executable=shell, stdout=stdout, check=False)
    result = CommandResult(
        command=command,
        code=proc.returncode,
        duration_ms=int((time.monotonic() - started) * 1000),
    )
    if ctx is not None:
        log_event(
            ctx,
            "debug" if result.ok else "error",
            "process",
            "run-command",
            command=command,
            code=result.code,
            duration_ms=result.duration_ms,
        )
    return result


def shell_runner(ctx: RunContext) -> CommandRunner:
    stdout = STDERR_FD if ctx.as_json else None

    def _run(command: str) -> CommandResult:
        return run_shell(command, cwd=ctx.cwd, shell=ctx.shell, ctx=ctx, stdout=stdout)

    return _run
