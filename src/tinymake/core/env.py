"""Centralized environment variable helpers."""

from __future__ import annotations

import os

from ..errors import ConfigError

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def getenv(name: str, default: str | None = None) -> str | None:
    return os.environ.get(name, default)


def getenv_flag(name: str) -> bool | None:
    raw = os.environ.get(name)
    if raw is None:
        return None
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"invalid boolean for {name}: {raw!r}")
