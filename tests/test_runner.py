from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from cratecheck.config import CIConfig, ConfigError
from cratecheck.model import Step
from cratecheck.runner import EXIT_NOT_FOUND, StepFailure, dry_run_step, run, run_step

from conftest import RecordingExecutor

TARGET = "x86_64-unknown-linux-gnu"

FULL_ORDER = ["build-debug", "build-release", "fmt-check", "clippy", "test-debug", "test-release"]


def test_linux_full_run(console, recorder: RecordingExecutor) -> None:
    result = run(CIConfig(os_name="linux", target=TARGET), execute=recorder)

    assert result.ok
    assert result.failure is None
    assert recorder.argvs == [
        ["cross", "build", "--target", TARGET],
        ["cross", "build", "--target", TARGET, "--release"],
        ["cross", "fmt", "--", "--check"],
        ["cross", "clippy"],
        ["cross", "test", "--target", TARGET],
        ["cross", "test", "--target", TARGET, "--release"],
    ]
    assert result.statuses() == {name: "ok" for name in FULL_ORDER}


def test_macos_skip_tests_only_builds(console, recorder: RecordingExecutor) -> None:
    config = CIConfig(os_name="macos", target="x86_64-apple-darwin", disable_tests="1")
    result = run(config, execute=recorder)

    assert result.ok
    assert recorder.argvs == [
        ["cargo", "build", "--target", "x86_64-apple-darwin"],
        ["cargo", "build", "--target", "x86_64-apple-darwin", "--release"],
    ]


def test_release_tag_runs_nothing(console, recorder: RecordingExecutor, capsys) -> None:
    result = run(CIConfig(tag="v1.2.3"), execute=recorder)

    assert result.ok
    assert recorder.calls == []
    assert result.results == []
    assert "v1.2.3" in capsys.readouterr().out


@pytest.mark.parametrize("failing", FULL_ORDER)
def test_fail_fast_stops_at_first_failure(console, failing: str) -> None:
    recorder = RecordingExecutor(exit_codes={failing: 101})
    result = run(CIConfig(os_name="linux", target=TARGET), execute=recorder)

    k = FULL_ORDER.index(failing)
    assert recorder.names == FULL_ORDER[: k + 1]
    assert not result.ok
    assert result.failure == StepFailure(
        job="test-crate",
        step=failing,
        cmd=result.job.steps[k].cmd,
        exit_code=101,
    )

    statuses = result.statuses()
    assert statuses[failing] == "failed"
    assert all(statuses[name] == "not run" for name in FULL_ORDER[k + 1:])


def test_build_failure_with_tests_disabled(console) -> None:
    recorder = RecordingExecutor(exit_codes={"build-debug": 1})
    result = run(CIConfig(target=TARGET, disable_tests="yes"), execute=recorder)

    assert recorder.names == ["build-debug"]
    assert result.failure is not None
    assert result.failure.exit_code == 1


def test_config_error_raised_before_any_step(console, recorder: RecordingExecutor) -> None:
    with pytest.raises(ConfigError):
        run(CIConfig(os_name="linux"), execute=recorder)
    assert recorder.calls == []


def test_steps_run_in_repo_root_with_extra_env(console, recorder: RecordingExecutor, tmp_path: Path) -> None:
    config = CIConfig(target=TARGET, repo_root=str(tmp_path), env={"RUSTFLAGS": "-D warnings"})
    run(config, execute=recorder)

    assert all(cwd == tmp_path.resolve() for cwd in recorder.cwds)
    assert all(env["RUSTFLAGS"] == "-D warnings" for env in recorder.envs)
    # process environment is inherited as well
    assert all(env.get("PATH") == os.environ.get("PATH") for env in recorder.envs)


def test_commands_are_traced(console, recorder: RecordingExecutor, capsys) -> None:
    run(CIConfig(os_name="linux", target=TARGET, disable_tests="1"), execute=recorder)

    out = capsys.readouterr().out
    assert f"+ cross build --target {TARGET}\n" in out
    assert f"+ cross build --target {TARGET} --release\n" in out


def test_dry_run_succeeds_without_executing(console) -> None:
    result = run(CIConfig(target=TARGET), execute=dry_run_step)
    assert result.ok
    assert [r.step.name for r in result.results] == FULL_ORDER


# ----------------------------------------------------------------------
# run_step against real processes
# ----------------------------------------------------------------------

def test_run_step_returns_exit_status(console, tmp_path: Path) -> None:
    step = Step(name="exit-3", args=(sys.executable, "-c", "import sys; sys.exit(3)"))
    assert run_step(step, tmp_path, os.environ.copy()) == 3


def test_run_step_passes_env_and_cwd(console, tmp_path: Path) -> None:
    script = (
        "import os, sys\n"
        "ok = os.environ.get('CRATECHECK_ENV_CHECK') == 'yes' and os.path.samefile(os.getcwd(), sys.argv[1])\n"
        "sys.exit(0 if ok else 5)\n"
    )
    env = dict(os.environ, CRATECHECK_ENV_CHECK="yes")
    step = Step(name="env-check", args=(sys.executable, "-c", script, str(tmp_path)))
    assert run_step(step, tmp_path, env) == 0


def test_run_step_missing_tool(console, tmp_path: Path, capsys) -> None:
    step = Step(name="build-debug", args=("cratecheck-no-such-tool", "build"))
    assert run_step(step, tmp_path, os.environ.copy()) == EXIT_NOT_FOUND
    assert "command not found" in capsys.readouterr().err


def test_missing_tool_failure_shows_install_hint(console, capsys) -> None:
    recorder = RecordingExecutor(exit_codes={"build-debug": EXIT_NOT_FOUND})
    result = run(CIConfig(os_name="linux", target=TARGET), execute=recorder)

    assert result.failure is not None
    assert result.failure.exit_code == EXIT_NOT_FOUND
    assert "Hint: Install cross (cargo install cross)" in capsys.readouterr().out


def test_ordinary_failure_has_no_hint(console, capsys) -> None:
    recorder = RecordingExecutor(exit_codes={"clippy": 101})
    run(CIConfig(target=TARGET), execute=recorder)

    assert "Hint:" not in capsys.readouterr().out
