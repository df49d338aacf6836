"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest

from lockwatch.config import runtime
from lockwatch.policy import TerminationPolicy
from tests.helpers.lockwatch_fakes import FakeDisplaySource, FakeLockSource, ManualScheduler

_LOCKWATCH_ENV = (
    "LOCKWATCH_PROCESSES",
    "LOCKWATCH_EVENT",
    "LOCKWATCH_SIGNAL",
    "LOCKWATCH_FORCE_SIGNAL",
    "LOCKWATCH_FORCE_AFTER_MS",
    "LOCKWATCH_WAIT_FOR_DISPLAYS",
    "LOCKWATCH_DISPLAY_TIMEOUT_MS",
    "LOCKWATCH_SETTLE_DELAY_MS",
    "LOCKWATCH_VERBOSE",
    "LOCKWATCH_LOG_FILE",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep developer env vars and dotenv files out of every test."""
    for name in _LOCKWATCH_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LOCKWATCH_RUNTIME_DIR", str(tmp_path / "runtime"))
    monkeypatch.setattr(runtime, "_DOTENV_CANDIDATES", ())
    monkeypatch.setattr(runtime, "_DEFAULT_VALUES", None)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def lock_source() -> FakeLockSource:
    return FakeLockSource()


@pytest.fixture
def display_source() -> FakeDisplaySource:
    return FakeDisplaySource()


@pytest.fixture
def make_policy():
    def _make(**overrides) -> TerminationPolicy:
        names = overrides.pop("names", ["WallpaperAerialsExtension"])
        return TerminationPolicy.for_processes(names, **overrides)

    return _make
