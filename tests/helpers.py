from __future__ import annotations

import os
from pathlib import Path

from tinymake.core.fs import PathState
from tinymake.core.process import CommandResult
from tinymake.core.source import Source
from tinymake.rules import RuleTable, parse_source


def table_from(text: str, label: str = "Tinymakefile") -> RuleTable:
    return parse_source(Source.from_text(text, label))


class FakeFS:
    """In-memory mtimes keyed by name; every touch advances a logical clock."""

    def __init__(self, files: dict[str, int] | None = None) -> None:
        self.files: dict[str, int] = dict(files or {})
        self.clock = max(self.files.values(), default=0)

    def touch(self, name: str) -> None:
        self.clock += 1
        self.files[name] = self.clock

    def stat(self, name: str) -> PathState:
        if name not in self.files:
            return PathState(path=name, exists=False)
        return PathState(path=name, exists=True, mtime=self.files[name])


class FakeRunner:
    """Records commands; `touch NAME...` updates the fake filesystem."""

    def __init__(self, fs: FakeFS, failing: tuple[str, ...] = ("false",)) -> None:
        self.fs = fs
        self.failing = set(failing)
        self.calls: list[str] = []

    def __call__(self, command: str) -> CommandResult:
        self.calls.append(command)
        if command in self.failing:
            return CommandResult(command=command, code=1, duration_ms=0)
        parts = command.split()
        if parts and parts[0] == "touch":
            for name in parts[1:]:
                self.fs.touch(name)
        return CommandResult(command=command, code=0, duration_ms=0)


def set_mtime(path: Path, seconds: int) -> None:
    os.utime(path, (seconds, seconds))
