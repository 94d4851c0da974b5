# runner.py
from __future__ import annotations

import os
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Dict, Optional

from .dsl import plan, select_tool
from .model import Job, RunResult, Step, StepResult
from .ui.console import Console, get_console

if TYPE_CHECKING:
    from .config import CIConfig


@dataclass
class CIError(Exception):
    """
    Structured error for problems found before the pipeline starts.
    Step failures are reported separately as StepFailure.
    """
    kind: str
    job: str
    step: str | None
    message: str
    details: dict

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        if self.job:
            lines.append(f"job={self.job}")
        if self.step:
            lines.append(f"step={self.step}")
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


@dataclass
class StepFailure(Exception):
    job: str
    step: str
    cmd: str
    exit_code: int

    def __str__(self) -> str:
        return f"[{self.job}] step '{self.step}' failed (exit={self.exit_code}): {self.cmd}"


TOOL_HINTS = {
    "cargo": "Install Rust via rustup (https://rustup.rs) or fix PATH.",
    "cross": "Install cross (cargo install cross) and make sure Docker is running.",
}

# exit status a shell reports for a command it cannot find
EXIT_NOT_FOUND = 127

Executor = Callable[[Step, Path, Dict[str, str]], int]


# ----------------------------------------------------------------------
# Execution primitives
# ----------------------------------------------------------------------

def run_step(step: Step, cwd: Path, env: Dict[str, str]) -> int:
    """
    Run one tool invocation and block until it exits.

    Output goes straight to the inherited stdout/stderr so CI logs show
    the tool's own output interleaved with ours.
    """
    try:
        proc = subprocess.run(list(step.args), cwd=str(cwd), env=env)
    except FileNotFoundError:
        get_console().print_error("Tool not found", f"{step.tool}: command not found (step {step.name})")
        return EXIT_NOT_FOUND
    return proc.returncode


def tool_hint(step: Step, exit_code: int) -> Optional[str]:
    if exit_code != EXIT_NOT_FOUND:
        return None
    return TOOL_HINTS.get(step.tool, f"Install {step.tool} or fix PATH.")


def dry_run_step(step: Step, cwd: Path, env: Dict[str, str]) -> int:
    """Executor that only traces; every step counts as a success."""
    return 0


def _step_env(job: Job) -> Dict[str, str]:
    env = os.environ.copy()
    env.update(job.env or {})
    return env


def run_job(
    job: Job,
    repo_root: Path,
    execute: Executor = run_step,
    console: Optional[Console] = None,
) -> RunResult:
    """
    Run job.steps in order, stopping at the first non-zero exit.

    Never raises for a failing tool: the failure is reported in
    RunResult.failure and later steps are left unexecuted.
    """
    console = console or get_console()
    result = RunResult(job=job)
    env = _step_env(job)

    for step in job.steps:
        console.print_step(step.name, step.cmd)
        started = time.monotonic()
        exit_code = execute(step, repo_root, env)
        step_result = StepResult(step=step, exit_code=exit_code, duration=time.monotonic() - started)
        result.results.append(step_result)

        if not step_result.ok:
            result.failure = StepFailure(job=job.name, step=step.name, cmd=step.cmd, exit_code=exit_code)
            console.print_failure(
                step.name,
                str(result.failure),
                exit_code=exit_code,
                hint=tool_hint(step, exit_code),
            )
            return result

        console.print_debug(f"{step.name} finished in {step_result.duration:.1f}s")

    return result


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------

def run(
    config: CIConfig,
    *,
    execute: Executor = run_step,
    console: Optional[Console] = None,
) -> RunResult:
    """
    Orchestrate one CI run for config.

    Raises CIError (before anything runs) when the configuration is unusable.
    """
    console = console or get_console()
    config.validate()

    job = plan(config)

    if job.mode == "deploy":
        console.print_info(f"Tag build ({config.tag}): skipping test phase for deploy")
        return RunResult(job=job)

    repo_root = Path(config.repo_root).expanduser().resolve()

    console.print_run_started(
        tool=select_tool(config.os_name),
        target=config.target,
        mode=job.mode,
        step_count=len(job.steps),
    )
    if job.mode == "build-only":
        console.print_info("DISABLE_TESTS is set: fmt, clippy and tests will not run")

    return run_job(job, repo_root, execute=execute, console=console)
