"""Console output formatting utilities for cratecheck."""

from __future__ import annotations

import sys
from typing import Optional


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_run_started(
        self,
        tool: str,
        target: str,
        mode: str,
        step_count: int,
    ) -> None:
        """Print run start information."""
        print("\nRUN STARTED")
        print(f"Tool: {tool}")
        print(f"Target: {target}")
        print(f"Mode: {mode}")
        print(f"Steps: {step_count}")
        print()

    def print_step(self, name: str, cmd: str) -> None:
        """Print step start message, followed by the traced command line."""
        print(f"\nSTEP: {name}")
        print(f"+ {cmd}", flush=True)

    def print_failure(
        self,
        name: str,
        reason: str,
        exit_code: Optional[int] = None,
        hint: Optional[str] = None,
    ) -> None:
        """
        Print step failure message.

        Args:
            name: Step name
            reason: Failure reason/error message
            exit_code: Optional exit code
            hint: Optional hint for user
        """
        print(f"STEP FAILED: {name}")
        if exit_code is not None:
            print(f"Exit code: {exit_code}")
        if hint:
            print(f"Hint: {hint}")
        if self.debug:
            print(f"Error details: {reason}")

    def print_plan(self, tool: str, mode: str, cmds: list[str]) -> None:
        """Print the resolved plan without running it."""
        print(f"Tool: {tool}")
        print(f"Mode: {mode}")
        if not cmds:
            print("  (nothing to run)")
        for cmd in cmds:
            print(f"  {cmd}")

    def print_results(self, results: dict[str, str], durations: Optional[dict[str, float]] = None) -> None:
        """Print final results summary."""
        durations = durations or {}
        print("\n" + "=" * 40)
        print("RESULTS")
        print("=" * 40)
        if not results:
            print("  (no steps)")
        for step, status in results.items():
            status_display = status.upper() if status != "ok" else "SUCCESS"
            if step in durations:
                print(f"  {step}: {status_display} ({durations[step]:.1f}s)")
            else:
                print(f"  {step}: {status_display}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exc()
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
