# model.py
from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from typing import Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .runner import StepFailure


@dataclass(frozen=True)
class Step:
    """A single tool invocation inside the crate pipeline."""
    name: str
    args: tuple[str, ...]

    @property
    def cmd(self) -> str:
        return " ".join(shlex.quote(a) for a in self.args)

    @property
    def tool(self) -> str:
        return self.args[0]


@dataclass
class Job:
    """
    The planned pipeline for one configuration.

    mode is one of:
      - "deploy"      tag build, no steps
      - "build-only"  tests disabled, debug + release builds
      - "full"        builds, fmt, clippy, debug + release tests
    """
    name: str
    steps: list[Step]
    mode: str = "full"
    env: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class StepResult:
    step: Step
    exit_code: int
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


@dataclass
class RunResult:
    """Outcome of one orchestrator run. failure is set iff a step exited non-zero."""
    job: Job
    results: List[StepResult] = field(default_factory=list)
    failure: Optional["StepFailure"] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def statuses(self) -> dict[str, str]:
        out: dict[str, str] = {}
        by_name = {r.step.name: r for r in self.results}
        for step in self.job.steps:
            r = by_name.get(step.name)
            if r is None:
                out[step.name] = "not run"
            else:
                out[step.name] = "ok" if r.ok else "failed"
        return out
