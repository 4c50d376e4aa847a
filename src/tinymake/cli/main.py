from __future__ import annotations

import argparse
import os
import sys

from .. import __version__
from ..core.context import RunContext
from ..core.logging import log_event
from ..core.source import printable
from ..errors import TinymakeError
from ..exit_codes import OK
from ..session import BuildSession
from .output import (
    build_base_payload,
    emit,
    render_chain,
    render_error,
    render_rules,
    report_payload,
    rules_payload,
)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="tinymake",
        description="Bring a target up to date by re-running only the stale rules of a rule file.",
    )
    p.add_argument("--version", action="version", version=f"tinymake {__version__}")
    p.add_argument("target", nargs="?", help="target to build (default: first rule in the file)")
    p.add_argument("-f", "--file", help="rule file path (default: Tinymakefile)")
    p.add_argument("--cwd", help="run from this directory")
    p.add_argument("--json", action="store_true", help="emit JSON output")
    p.add_argument("--log-json", action="store_true", help="emit structured log events as JSON on stderr")
    p.add_argument("--no-detect-cycles", action="store_true", help="do not fail fast on circular dependencies")
    mode = p.add_mutually_exclusive_group()
    mode.add_argument("--list-rules", action="store_true", help="print parsed rules and exit")
    mode.add_argument("--print-chain", action="store_true", help="print the resolved dependency chain and exit")
    vg = p.add_mutually_exclusive_group()
    vg.add_argument("--verbose", action="store_true", help="enable verbose diagnostics")
    vg.add_argument("--quiet", action="store_true", help="only emit errors")
    return p


def _run(ctx: RunContext, ns: argparse.Namespace) -> int:
    log_event(ctx, "debug", "cli", "start", file=str(ctx.rule_file), target=ns.target or "")
    session = BuildSession.from_file(ctx)

    if ns.list_rules:
        if ctx.as_json:
            emit({**build_base_payload(ctx), "rules": rules_payload(session.table)})
        else:
            for line in render_rules(session.table):
                print(line)
        return OK

    if ns.print_chain:
        chain = session.resolve(ns.target)
        if ctx.as_json:
            emit({**build_base_payload(ctx), "chain": list(chain)})
        else:
            for line in render_chain(chain):
                print(line)
        return OK

    report = session.build(ns.target)
    if ctx.as_json:
        emit({**build_base_payload(ctx), "build": report_payload(report)})
    elif report.up_to_date and not ctx.quiet:
        print(f'tinymake: "{printable(report.target)}" is up to date.')
    return OK


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    ns = p.parse_args(argv)
    if ns.cwd:
        os.chdir(ns.cwd)
    ctx: RunContext | None = None
    try:
        ctx = RunContext.from_args(
            rule_file=ns.file,
            output_format="json" if ns.json else "text",
            verbose=ns.verbose or None,
            quiet=ns.quiet or None,
            log_json=True if ns.log_json else None,
            detect_cycles=False if ns.no_detect_cycles else None,
        )
        return _run(ctx, ns)
    except TinymakeError as exc:
        if ctx is not None:
            log_event(ctx, "error", "cli", "failed", kind=exc.kind, code=exc.code)
        print(render_error(as_json=ns.json, message=exc.message, code=exc.code, kind=exc.kind))
        return exc.code


if __name__ == "__main__":
    sys.exit(main())
