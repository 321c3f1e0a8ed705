"""Models for outcome documents reported by target runs."""

from collections.abc import Mapping, Sequence
from datetime import datetime
from pathlib import Path
from typing import Literal, Self

from pydantic import Field, NonNegativeFloat, NonNegativeInt, model_validator

from fanout_runner.models.base import Model
from fanout_runner.models.outcome import TargetRunOutcome, TestIdentity, TestResult


class TestEntry(Model):
    """One test as reported by a target run."""

    __test__ = False

    class_name: str = Field(..., description="Fully qualified declaring class")
    method_name: str = Field(..., description="Test method name")
    status: Literal["pass", "fail"] = Field(..., description="Test status")
    duration: NonNegativeFloat = Field(default=0.0, description="Seconds")
    failure: str | None = Field(default=None, description="Failure stack trace")
    screenshots: Sequence[Path] = Field(
        default_factory=list,
        description="Screenshot paths, relative to the target output directory",
    )
    animated_gif: Path | None = Field(
        default=None, description="Animation path, relative like screenshots"
    )


class OutcomeDocument(Model):
    """Outcome of a full suite run as reported by one target.

    Counts not given explicitly are derived from the entries; either way the
    failed count may not exceed the started count.
    """

    device_name: str | None = Field(default=None, description="Target label")
    started: datetime | None = Field(default=None, description="Run start time")
    duration: NonNegativeFloat = Field(default=0.0, description="Run seconds")
    tests_started: NonNegativeInt | None = Field(
        default=None, description="Tests started (defaults to len(tests))"
    )
    tests_failed: NonNegativeInt | None = Field(
        default=None, description="Tests failed (defaults to failing entries)"
    )
    tests: Sequence[TestEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_counts(self) -> Self:
        started, failed = self.counts()
        if failed > started:
            raise ValueError(
                f"tests_failed ({failed}) exceeds tests_started ({started})"
            )
        return self

    def latest_entries(self) -> Mapping[TestIdentity, TestEntry]:
        """Entries by identity; a test listed twice keeps its last entry."""
        return {
            TestIdentity(entry.class_name, entry.method_name): entry
            for entry in self.tests
        }

    def counts(self) -> tuple[int, int]:
        """Started and failed counts, explicit values taking precedence."""
        entries = self.latest_entries()
        started = len(entries) if self.tests_started is None else self.tests_started
        if self.tests_failed is not None:
            return started, self.tests_failed
        return started, sum(1 for e in entries.values() if e.status == "fail")

    def to_outcome(self, target_id: str, output_dir: Path) -> TargetRunOutcome:
        """Convert into a TargetRunOutcome, resolving artifact paths."""
        tests = {
            identity: TestResult(
                status=entry.status,
                duration=entry.duration,
                failure=entry.failure,
                screenshots=tuple(output_dir / path for path in entry.screenshots),
                animated_gif=(
                    output_dir / entry.animated_gif if entry.animated_gif else None
                ),
            )
            for identity, entry in self.latest_entries().items()
        }
        started, failed = self.counts()
        return TargetRunOutcome(
            target_id=target_id,
            tests_started=started,
            tests_failed=failed,
            tests=tests,
            device_name=self.device_name,
            started=self.started,
            duration=self.duration,
        )
