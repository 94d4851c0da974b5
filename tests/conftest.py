"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

import pytest

from cratecheck.model import Step
from cratecheck.ui.console import Console, set_console

CI_VARS = ("TRAVIS_OS_NAME", "TARGET", "DISABLE_TESTS", "TRAVIS_TAG")


class RecordingExecutor:
    """
    Stand-in for runner.run_step: remembers every invocation and returns
    a canned exit status (0 unless listed in exit_codes by step name).
    """

    def __init__(self, exit_codes: Optional[Dict[str, int]] = None):
        self.exit_codes = exit_codes or {}
        self.calls: List[Step] = []
        self.cwds: List[Path] = []
        self.envs: List[Dict[str, str]] = []

    def __call__(self, step: Step, cwd: Path, env: Dict[str, str]) -> int:
        self.calls.append(step)
        self.cwds.append(cwd)
        self.envs.append(env)
        return self.exit_codes.get(step.name, 0)

    @property
    def argvs(self) -> List[List[str]]:
        return [list(s.args) for s in self.calls]

    @property
    def names(self) -> List[str]:
        return [s.name for s in self.calls]


@pytest.fixture(autouse=True)
def clean_ci_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the host's CI variables from leaking into tests."""
    for var in CI_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def console() -> Console:
    c = Console(debug=False)
    set_console(c)
    return c


@pytest.fixture
def recorder() -> RecordingExecutor:
    return RecordingExecutor()
