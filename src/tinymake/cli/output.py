"""CLI payload output helpers."""

from __future__ import annotations

import json
from typing import Any

from ..core.context import RunContext
from ..core.source import printable
from ..rules.executor import BuildReport
from ..rules.parser import RuleTable
from ..rules.resolver import DependencyChain

SCHEMA_VERSION = 1


def dumps_json(payload: Any) -> str:
    return json.dumps(payload, sort_keys=True)


def emit(payload: dict[str, object]) -> None:
    print(dumps_json(payload))


def build_base_payload(ctx: RunContext, status: str = "ok") -> dict[str, object]:
    return {
        "schema_version": SCHEMA_VERSION,
        "tool": "tinymake",
        "status": status,
        "run_id": ctx.run_id,
        "rule_file": str(ctx.rule_file),
    }


def rules_payload(table: RuleTable) -> list[dict[str, object]]:
    return [
        {
            "target": rule.name,
            "line": rule.line,
            "dependencies": rule.dependency_names(),
            "commands": rule.command_lines(),
        }
        for rule in table
    ]


def render_rules(table: RuleTable) -> list[str]:
    lines: list[str] = []
    for rule in table:
        lines.append(f"rule: {printable(rule.name)}")
        lines.extend(f"  dependency: {printable(dep)}" for dep in rule.dependency_names())
        lines.extend(f"  command: {printable(cmd)}" for cmd in rule.command_lines())
    return lines


def render_chain(chain: DependencyChain) -> list[str]:
    return [f"node: {printable(name)}" for name in chain]


def report_payload(report: BuildReport) -> dict[str, object]:
    return {
        "target": report.target,
        "up_to_date": report.up_to_date,
        "commands": list(report.commands),
        "rebuilt": list(report.rebuilt),
    }


def render_error(*, as_json: bool, message: str, code: int, kind: str) -> str:
    if as_json:
        return dumps_json(
            {
                "schema_version": SCHEMA_VERSION,
                "tool": "tinymake",
                "status": "error",
                "errors": [{"code": code, "kind": kind, "message": message}],
            }
        )
    return f"ERROR: {printable(message)}"
