# src/cratecheck/dsl.py
from __future__ import annotations

from typing import TYPE_CHECKING, List

from .model import Job, Step

if TYPE_CHECKING:
    from .config import CIConfig


LINUX = "linux"
CROSS_TOOL = "cross"    # cross-compiling cargo wrapper, used on linux runners
NATIVE_TOOL = "cargo"

JOB_NAME = "test-crate"


# ---------------------------------------------------------------------
# Tool selection
# ---------------------------------------------------------------------

def select_tool(os_name: str) -> str:
    """Use cross for linux, cargo for macOS and Windows."""
    return CROSS_TOOL if os_name == LINUX else NATIVE_TOOL


# ---------------------------------------------------------------------
# Step helper
# ---------------------------------------------------------------------

def cargo_step(name: str, tool: str, *args: str) -> Step:
    """Create a step that runs `<tool> <args...>`."""
    return Step(name=name, args=(tool, *args))


# ---------------------------------------------------------------------
# Plan
# ---------------------------------------------------------------------

def build_steps(tool: str, target: str) -> List[Step]:
    return [
        cargo_step("build-debug", tool, "build", "--target", target),
        cargo_step("build-release", tool, "build", "--target", target, "--release"),
    ]


def check_steps(tool: str, target: str) -> List[Step]:
    return [
        cargo_step("fmt-check", tool, "fmt", "--", "--check"),
        cargo_step("clippy", tool, "clippy"),
        cargo_step("test-debug", tool, "test", "--target", target),
        cargo_step("test-release", tool, "test", "--target", target, "--release"),
    ]


def plan(config: CIConfig) -> Job:
    """
    Turn a resolved config into the ordered list of steps to run.

    We don't run the test phase when doing deploys, so a tag build
    plans zero steps.
    """
    if config.is_release_tag:
        return Job(name=JOB_NAME, steps=[], mode="deploy", env=dict(config.env))

    tool = select_tool(config.os_name)
    steps = build_steps(tool, config.target)
    mode = "build-only"

    if not config.skip_tests:
        steps.extend(check_steps(tool, config.target))
        mode = "full"

    return Job(name=JOB_NAME, steps=steps, mode=mode, env=dict(config.env))
