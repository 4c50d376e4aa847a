from __future__ import annotations

import os
from pathlib import Path

from .core.context import RunContext
from .core.fs import PathState, stat_path
from .core.logging import enabled, log_event
from .core.process import CommandRunner, shell_runner
from .core.source import Source, printable, read_source
from .errors import BuildError
from .rules.executor import BuildReport, EchoFn, Executor, StatFn
from .rules.parser import RuleTable, parse_source
from .rules.resolver import DependencyChain, resolve


class BuildSession:
    """One parsed rule file plus the collaborators needed to build from it.

    The session keeps the source buffer alive for as long as its rules are
    used; every rule field is a span into it.
    """

    def __init__(
        self,
        ctx: RunContext,
        source: Source,
        runner: CommandRunner | None = None,
        stat: StatFn | None = None,
        echo: EchoFn | None = None,
    ) -> None:
        self.ctx = ctx
        self.source = source
        self.table: RuleTable = parse_source(source)
        self.runner = runner or shell_runner(ctx)
        self.stat = stat or _cwd_stat(ctx.cwd)
        self.echo = echo if echo is not None else _default_echo(ctx)
        log_event(ctx, "debug", "parse", "done", file=source.label, rules=len(self.table))

    @classmethod
    def from_file(
        cls,
        ctx: RunContext,
        path: Path | None = None,
        runner: CommandRunner | None = None,
        stat: StatFn | None = None,
    ) -> BuildSession:
        rule_file = path or ctx.rule_file
        label = rule_file.name if rule_file.parent == ctx.cwd else str(rule_file)
        return cls(ctx, read_source(rule_file, label=label), runner=runner, stat=stat)

    @classmethod
    def from_text(
        cls,
        ctx: RunContext,
        text: str,
        label: str = "<string>",
        runner: CommandRunner | None = None,
        stat: StatFn | None = None,
    ) -> BuildSession:
        return cls(ctx, Source.from_text(text, label), runner=runner, stat=stat)

    def default_target(self) -> str:
        target = self.table.default_target()
        if target is None:
            raise BuildError(f"no rules in {self.source.label}", context="lookup")
        return target

    def resolve(self, target: str | None = None) -> DependencyChain:
        name = target if target is not None else self.default_target()
        chain = resolve(self.table, name, detect_cycles=self.ctx.detect_cycles)
        if enabled(self.ctx, "debug"):
            for name in chain:
                log_event(self.ctx, "debug", "resolve", "node", node=name)
        return chain

    def build(self, target: str | None = None) -> BuildReport:
        chain = self.resolve(target)
        executor = Executor(self.table, self.runner, stat=self.stat, echo=self.echo, ctx=self.ctx)
        return executor.execute(chain)


def _cwd_stat(cwd: Path) -> StatFn:
    def _stat(name: str) -> PathState:
        state = stat_path(os.path.join(cwd, name))
        return PathState(path=name, exists=state.exists, mtime=state.mtime)

    return _stat


def _default_echo(ctx: RunContext) -> EchoFn | None:
    if ctx.quiet or ctx.as_json:
        return None

    def _echo(command: str) -> None:
        print(printable(command), flush=True)

    return _echo
