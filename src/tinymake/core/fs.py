"""Filesystem metadata queries used to decide staleness."""

from __future__ import annotations

import os
from dataclasses import dataclass

# Linux PATH_MAX, including the terminating NUL of the C API.
PATH_MAX = 4096


@dataclass(frozen=True)
class PathState:
    path: str
    exists: bool
    mtime: int = 0

    def newer_than(self, other: PathState) -> bool:
        # Whole seconds; sub-second ties are not "newer".
        return self.mtime > other.mtime


def path_too_long(path: str) -> bool:
    return len(os.fsencode(path)) >= PATH_MAX


def stat_path(path: str) -> PathState:
    """Return existence and mtime of `path`.

    Only a missing path is reported as `exists=False`; any other OSError
    propagates to the caller.
    """
    try:
        st = os.stat(path)
    except FileNotFoundError:
        return PathState(path=path, exists=False)
    return PathState(path=path, exists=True, mtime=st.st_mtime_ns // 1_000_000_000)
