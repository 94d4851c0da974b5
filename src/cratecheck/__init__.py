from .config import CIConfig, ConfigError
from .dsl import cargo_step, plan, select_tool
from .runner import run, CIError, StepFailure
from .model import Job, Step, StepResult, RunResult

__all__ = [
    "CIConfig", "ConfigError", "cargo_step", "plan", "select_tool",
    "run", "CIError", "StepFailure", "Job", "Step", "StepResult", "RunResult",
]
