"""Configuration for a fan-out execution."""

from pathlib import Path

from pydantic import BaseModel, PositiveFloat

from fanout_runner.aggregator import DEFAULT_TITLE

DEFAULT_OUTPUT_DIRECTORY = Path("fanout-output")


class ConfigurationError(ValueError):
    """Raised when required inputs are missing or invalid before execution."""


class ExecutionConfig(BaseModel):
    """Inputs shared by every target run."""

    title: str = DEFAULT_TITLE
    application: Path
    tests: Path
    output: Path = DEFAULT_OUTPUT_DIRECTORY
    # Seconds a single target may run before it is recorded as a fault
    target_timeout: PositiveFloat | None = None

    def check_artifacts(self) -> None:
        """Raise ConfigurationError unless both input artifacts exist."""
        if not self.application.exists():
            raise ConfigurationError(
                f"Could not find application artifact: {self.application}"
            )
        if not self.tests.exists():
            raise ConfigurationError(f"Could not find test artifact: {self.tests}")
