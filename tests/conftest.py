from __future__ import annotations

import socket
from pathlib import Path

import pytest
from hypothesis import settings

from tinymake.core.context import RunContext

from helpers import FakeFS, FakeRunner

_ALLOWED_MARKERS = {"unit", "integration", "slow"}

settings.register_profile("tinymake", deadline=None, max_examples=200)
settings.load_profile("tinymake")


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        names = {mark.name for mark in item.iter_markers()}
        if not names.intersection(_ALLOWED_MARKERS):
            item.add_marker("unit")


@pytest.fixture(autouse=True)
def no_network_for_unit(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch) -> None:
    if request.node.get_closest_marker("integration") or request.node.get_closest_marker("slow"):
        return

    def _blocked(*_args: object, **_kwargs: object) -> socket.socket:
        raise RuntimeError("network disabled in unit tests")

    def _blocked_connect(*_args: object, **_kwargs: object) -> None:
        raise RuntimeError("network disabled in unit tests")

    monkeypatch.setattr(socket, "create_connection", _blocked)
    monkeypatch.setattr(socket.socket, "connect", _blocked_connect)


@pytest.fixture(autouse=True)
def clean_tinymake_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("TINYMAKE_FILE", "TINYMAKE_LOG_JSON", "TINYMAKE_DETECT_CYCLES", "TINYMAKE_SHELL", "RUN_ID"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def ctx(tmp_path: Path) -> RunContext:
    return RunContext.from_args(cwd=tmp_path, quiet=True, run_id="pytest-run")


@pytest.fixture
def fake_fs() -> FakeFS:
    return FakeFS()


@pytest.fixture
def fake_runner(fake_fs: FakeFS) -> FakeRunner:
    return FakeRunner(fake_fs)
