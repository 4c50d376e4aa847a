"""Optional `tinymake.toml` loading and validation."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

import jsonschema

from ..contracts import CONFIG_SCHEMA, load_schema
from ..errors import ConfigError

CONFIG_FILE = "tinymake.toml"
DEFAULT_RULE_FILE = "Tinymakefile"

DEFAULTS: dict[str, Any] = {
    "rule_file": DEFAULT_RULE_FILE,
    "detect_cycles": True,
    "log_json": False,
    "shell": None,
    "verbose": False,
    "quiet": False,
}


def validate_config(payload: dict[str, Any], label: str = CONFIG_FILE) -> None:
    try:
        jsonschema.validate(payload, load_schema(CONFIG_SCHEMA))
    except jsonschema.ValidationError as exc:
        pointer = "/".join(str(p) for p in exc.absolute_path)
        loc = pointer or "<root>"
        raise ConfigError(f"{label}: invalid config at {loc}: {exc.message}") from exc


def load_config(cwd: Path) -> dict[str, Any]:
    """Return DEFAULTS overlaid with `tinymake.toml` from `cwd`, if present."""
    merged = dict(DEFAULTS)
    path = cwd / CONFIG_FILE
    if not path.is_file():
        return merged
    try:
        raw = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"{path}: {exc.strerror or exc}") from exc
    validate_config(raw, str(path))
    merged.update(raw)
    return merged
