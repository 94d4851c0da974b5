# cli.py
from __future__ import annotations

import sys
from typing import Callable

import click

from cratecheck.config import CIConfig, ConfigError
from cratecheck.dsl import plan as plan_job, select_tool
from cratecheck.runner import dry_run_step, run as run_pipeline, run_step
from cratecheck.ui.console import Console, set_console, get_console

EXIT_STEP_FAILED = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


def failure_exit_code(exit_code: int) -> int:
    """Exit with the failing tool's own status, like `set -e`; 1 when it has no valid one."""
    return exit_code if 1 <= exit_code <= 255 else EXIT_STEP_FAILED


def _parse_env(ctx, param, pairs: tuple[str, ...]) -> dict[str, str]:
    env: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}")
        env[key] = value
    return env


def config_options(fn: Callable) -> Callable:
    """Options that override the CI environment variables."""
    fn = click.option("--env", "env_pairs", multiple=True, metavar="KEY=VALUE", callback=_parse_env,
                      help="Extra environment for every tool invocation (repeatable)")(fn)
    fn = click.option("--repo-root", default=None, type=click.Path(file_okay=False),
                      help="Directory to run the tools in (default: current directory)")(fn)
    fn = click.option("--tag", default=None, help="Release tag; when non-empty nothing runs (overrides TRAVIS_TAG)")(fn)
    fn = click.option("--skip-tests/--no-skip-tests", default=None,
                      help="Only build, skip fmt/clippy/tests (overrides DISABLE_TESTS)")(fn)
    fn = click.option("--target", default=None, help="Target triple (overrides TARGET)")(fn)
    fn = click.option("--os-name", default=None, help="Host OS name; 'linux' selects cross (overrides TRAVIS_OS_NAME)")(fn)
    return fn


def resolve_config(os_name, target, skip_tests, tag, repo_root, env_pairs) -> CIConfig:
    disable_tests = None
    if skip_tests is not None:
        disable_tests = "1" if skip_tests else ""

    return CIConfig.from_env().with_overrides(
        os_name=os_name,
        target=target,
        disable_tests=disable_tests,
        tag=tag,
        repo_root=repo_root,
        env=env_pairs or None,
    )


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """cratecheck: build, lint and test a crate across a CI target matrix."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@config_options
@click.option("--dry-run", is_flag=True, default=False, help="Print the commands without running them")
@click.pass_context
def run(ctx, os_name, target, skip_tests, tag, repo_root, env_pairs, dry_run):
    """Run the crate's build and test pipeline."""
    console = get_console()

    try:
        config = resolve_config(os_name, target, skip_tests, tag, repo_root, env_pairs)
        console.print_debug(f"Resolved config: {config}")

        result = run_pipeline(config, execute=dry_run_step if dry_run else run_step)

        durations = {r.step.name: r.duration for r in result.results}
        console.print_results(result.statuses(), durations=durations)

        if not result.ok:
            sys.exit(failure_exit_code(result.failure.exit_code))

    except ConfigError as e:
        console.print_error(
            "Invalid configuration",
            e.message,
            suggestion=e.details.get("hint"),
        )
        sys.exit(EXIT_CONFIG_ERROR)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as e:
        console.print_exception(e)
        sys.exit(EXIT_STEP_FAILED)


@cli.command()
@config_options
@click.pass_context
def plan(ctx, os_name, target, skip_tests, tag, repo_root, env_pairs):
    """Show which commands a run would execute."""
    console = get_console()

    try:
        config = resolve_config(os_name, target, skip_tests, tag, repo_root, env_pairs)
        config.validate()
    except ConfigError as e:
        console.print_error(
            "Invalid configuration",
            e.message,
            suggestion=e.details.get("hint"),
        )
        sys.exit(EXIT_CONFIG_ERROR)

    job = plan_job(config)
    console.print_plan(
        tool=select_tool(config.os_name),
        mode=job.mode,
        cmds=[step.cmd for step in job.steps],
    )


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
