"""Structured event logging to stderr.

Events are single lines, either `key=value` text or a sorted JSON object when
the run context asks for JSON logs. `--quiet` keeps only errors, `--verbose`
adds debug events such as per-node resolution output.
"""

from __future__ import annotations

import inspect
import json
import sys
from datetime import datetime, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .context import RunContext

_LEVELS = {"debug": 10, "info": 20, "warning": 30, "error": 40}


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _threshold(ctx: RunContext) -> int:
    if ctx.quiet:
        return _LEVELS["error"]
    if ctx.verbose:
        return _LEVELS["debug"]
    return _LEVELS["info"]


def enabled(ctx: RunContext, level: str) -> bool:
    return _LEVELS[level] >= _threshold(ctx)


def log_event(ctx: RunContext, level: str, component: str, action: str, **fields: object) -> None:
    if not enabled(ctx, level):
        return
    payload: dict[str, object] = {
        "ts": utc_now_iso(),
        "level": level,
        "run_id": ctx.run_id,
        "component": component,
        "action": action,
        **fields,
    }
    if ctx.log_json:
        caller = inspect.stack(context=0)[1]
        payload["file"] = caller.filename
        payload["line"] = caller.lineno
        sys.stderr.write(json.dumps(payload, sort_keys=True, default=str) + "\n")
        return
    core = f"ts={payload['ts']} level={level} run_id={ctx.run_id} component={component} action={action}"
    extras = " ".join(f"{key}={value}" for key, value in sorted(fields.items()))
    sys.stderr.write((core if not extras else f"{core} {extras}") + "\n")
