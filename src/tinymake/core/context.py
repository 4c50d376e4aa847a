from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

from .config import load_config
from .env import getenv, getenv_flag

OutputFormat = Literal["text", "json"]


@dataclass(frozen=True)
class RunContext:
    run_id: str
    cwd: Path
    rule_file: Path
    detect_cycles: bool
    shell: str | None
    output_format: OutputFormat
    verbose: bool
    quiet: bool
    log_json: bool

    @property
    def as_json(self) -> bool:
        return self.output_format == "json"

    @classmethod
    def from_args(
        cls,
        rule_file: str | None = None,
        cwd: str | Path | None = None,
        output_format: OutputFormat = "text",
        verbose: bool | None = None,
        quiet: bool | None = None,
        log_json: bool | None = None,
        detect_cycles: bool | None = None,
        run_id: str | None = None,
    ) -> RunContext:
        """Merge defaults, tinymake.toml, TINYMAKE_* env vars and explicit args, in that order."""
        resolved_cwd = Path(cwd).resolve() if cwd else Path.cwd().resolve()
        cfg = load_config(resolved_cwd)

        resolved_rule_file = rule_file or getenv("TINYMAKE_FILE") or cfg["rule_file"]
        resolved_shell = getenv("TINYMAKE_SHELL") or cfg["shell"]

        env_log_json = getenv_flag("TINYMAKE_LOG_JSON")
        env_detect_cycles = getenv_flag("TINYMAKE_DETECT_CYCLES")
        resolved_log_json = _first_set(log_json, env_log_json, cfg["log_json"])
        resolved_detect_cycles = _first_set(detect_cycles, env_detect_cycles, cfg["detect_cycles"])

        if verbose:
            resolved_verbose, resolved_quiet = True, False
        elif quiet:
            resolved_verbose, resolved_quiet = False, True
        else:
            resolved_verbose, resolved_quiet = bool(cfg["verbose"]), bool(cfg["quiet"])

        default_run = f"tinymake-{datetime.now(timezone.utc).strftime('%Y%m%d-%H%M%S')}-{os.getpid()}"
        return cls(
            run_id=run_id or getenv("RUN_ID") or default_run,
            cwd=resolved_cwd,
            rule_file=resolved_cwd / resolved_rule_file,
            detect_cycles=resolved_detect_cycles,
            shell=resolved_shell,
            output_format=output_format,
            verbose=resolved_verbose,
            quiet=resolved_quiet,
            log_json=resolved_log_json,
        )


def _first_set(*values: bool | None) -> bool:
    for value in values:
        if value is not None:
            return bool(value)
    return False
