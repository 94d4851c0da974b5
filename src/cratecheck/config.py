# config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

from .runner import CIError

# Environment variables set by the CI job (travis-style names)
OS_NAME_VAR = "TRAVIS_OS_NAME"
TARGET_VAR = "TARGET"
DISABLE_TESTS_VAR = "DISABLE_TESTS"
TAG_VAR = "TRAVIS_TAG"


class ConfigError(CIError):
    """Raised when the configuration cannot drive a run."""

    def __init__(self, message: str, **details):
        super().__init__(kind="config", job="", step=None, message=message, details=details)


@dataclass(frozen=True)
class CIConfig:
    """
    Everything the orchestrator needs, resolved once before any command runs.

    Flags follow shell `-z` semantics: any non-empty string (even "0" or
    whitespace) counts as set.
    """
    os_name: str = ""
    target: str = ""
    disable_tests: str = ""
    tag: str = ""
    repo_root: str = "."
    env: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> CIConfig:
        environ = os.environ if environ is None else environ
        return cls(
            os_name=environ.get(OS_NAME_VAR, ""),
            target=environ.get(TARGET_VAR, ""),
            disable_tests=environ.get(DISABLE_TESTS_VAR, ""),
            tag=environ.get(TAG_VAR, ""),
        )

    @property
    def skip_tests(self) -> bool:
        return self.disable_tests != ""

    @property
    def is_release_tag(self) -> bool:
        return self.tag != ""

    def with_overrides(self, **values) -> CIConfig:
        """Copy with every non-None value applied (CLI flags beat env vars)."""
        changes = {k: v for k, v in values.items() if v is not None}
        return replace(self, **changes)

    def validate(self) -> None:
        # deploy builds never invoke the tool, so nothing else matters
        if self.is_release_tag:
            return
        if not self.target:
            raise ConfigError(
                f"{TARGET_VAR} is not set",
                hint=f"export {TARGET_VAR}=<target triple> or pass --target",
            )
        root = Path(self.repo_root).expanduser()
        if not root.is_dir():
            raise ConfigError(f"repo root not found: {root.resolve()}")
