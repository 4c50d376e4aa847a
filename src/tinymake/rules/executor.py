"""Staleness-checked execution of a dependency chain.

The chain is walked leaves first. A target is (re)built when its file is
missing, or when one of its rule's dependencies has a newer mtime. Commands
run synchronously in declaration order; the first failure stops the build and
nothing is rolled back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from ..core.fs import PathState, path_too_long, stat_path
from ..core.logging import log_event
from ..errors import BuildError
from .parser import Rule, RuleTable
from .resolver import DependencyChain

if TYPE_CHECKING:
    from ..core.context import RunContext
    from ..core.process import CommandRunner

StatFn = Callable[[str], PathState]
EchoFn = Callable[[str], None]


@dataclass
class BuildReport:
    target: str
    commands: list[str] = field(default_factory=list)
    rebuilt: list[str] = field(default_factory=list)

    @property
    def up_to_date(self) -> bool:
        return not self.commands


class Executor:
    def __init__(
        self,
        table: RuleTable,
        runner: CommandRunner,
        stat: StatFn = stat_path,
        echo: EchoFn | None = None,
        ctx: RunContext | None = None,
    ) -> None:
        self.table = table
        self.runner = runner
        self.stat = stat
        self.echo = echo
        self.ctx = ctx

    def execute(self, chain: DependencyChain) -> BuildReport:
        report = BuildReport(target=chain.target)
        for name in chain.build_order():
            _check_length(name, "target")
            state = self._stat(name)
            if not state.exists:
                self._build_missing(name, report)
            else:
                self._refresh(name, state, report)
        self._log("debug", "done", target=chain.target, commands=len(report.commands))
        return report

    def _stat(self, name: str) -> PathState:
        try:
            return self.stat(name)
        except OSError as exc:
            raise BuildError(
                f'error determining if "{name}" exists: {exc.strerror or exc}',
                target=name,
                context="stat",
            ) from exc

    def _build_missing(self, name: str, report: BuildReport) -> None:
        rule = self.table.lookup(name)
        if rule is None:
            raise BuildError(f'no rule to make "{name}"', target=name, context="lookup")
        self._log("debug", "rebuild", target=name, reason="missing")
        self._run_rule(rule, report, "build")
        try:
            after = self.stat(name)
            reason = "No such file or directory"
        except OSError as exc:
            after = PathState(path=name, exists=False)
            reason = exc.strerror or str(exc)
        if not after.exists:
            raise BuildError(
                f'rule "{name}" should have created "{name}", but after running the rule it was checked and got: {reason}',
                target=name,
                context="stat",
            )

    def _refresh(self, name: str, state: PathState, report: BuildReport) -> None:
        rule = self.table.lookup(name)
        if rule is None:
            return
        for dep in rule.dependencies:
            dep_name = dep.text
            _check_length(dep_name, "dependency")
            dep_state = self._stat(dep_name)
            if not dep_state.exists:
                raise BuildError(
                    f'dependency "{dep_name}" of "{name}" not satisfied when it should be guaranteed, '
                    "is something else modifying the filesystem?",
                    target=name,
                    context="dependency",
                )
            if dep_state.newer_than(state):
                self._log("debug", "rebuild", target=name, reason="stale", newer=dep_name)
                self._run_rule(rule, report, "rebuild due to mtime")
                return

    def _run_rule(self, rule: Rule, report: BuildReport, context: str) -> None:
        for command in rule.command_lines():
            if self.echo is not None:
                self.echo(command)
            result = self.runner(command)
            report.commands.append(command)
            if not result.ok:
                raise BuildError(f'command "{command}" failed', target=rule.name, context=context)
        report.rebuilt.append(rule.name)

    def _log(self, level: str, action: str, **fields: object) -> None:
        if self.ctx is not None:
            log_event(self.ctx, level, "build", action, **fields)


def _check_length(name: str, context: str) -> None:
    if path_too_long(name):
        raise BuildError("path too long", target=name, context=context)


def execute(
    table: RuleTable,
    chain: DependencyChain,
    runner: CommandRunner,
    stat: StatFn = stat_path,
) -> BuildReport:
    return Executor(table, runner, stat=stat).execute(chain)
