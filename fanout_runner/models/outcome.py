"""Models for the outcome of running the suite on a single target."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from types import MappingProxyType
from typing import Literal

TestStatus = Literal["pass", "fail"]


@dataclass(frozen=True, order=True)
class TestIdentity:
    """Identifies one logical test across all targets."""

    __test__ = False

    class_name: str
    method_name: str

    @property
    def simple_class_name(self) -> str:
        """Class name without its package prefix."""
        return self.class_name.rpartition(".")[2]

    def __str__(self) -> str:
        return f"{self.class_name}#{self.method_name}"


@dataclass(frozen=True, kw_only=True)
class TestResult:
    """Result of one test on one target.

    Carries only the execution outcome and artifacts - the caller knows which
    target and test it belongs to.
    """

    __test__ = False

    status: TestStatus
    duration: float = 0.0
    failure: str | None = None
    screenshots: Sequence[Path] = ()
    animated_gif: Path | None = None


@dataclass(frozen=True, kw_only=True)
class TargetRunOutcome:
    """Result bundle produced by running the full suite once on one target."""

    target_id: str
    tests_started: int = 0
    tests_failed: int = 0
    exception: BaseException | None = None
    tests: Mapping[TestIdentity, TestResult] = field(
        default_factory=lambda: MappingProxyType({})
    )
    device_name: str | None = None
    started: datetime | None = None
    duration: float = 0.0

    def __post_init__(self) -> None:
        if not 0 <= self.tests_failed <= self.tests_started:
            raise ValueError(
                f"Target {self.target_id} reported {self.tests_failed} failed "
                f"of {self.tests_started} started tests"
            )
        # Freeze the per-test mapping so the outcome cannot change after handoff
        object.__setattr__(self, "tests", MappingProxyType(dict(self.tests)))

    @classmethod
    def from_fault(cls, target_id: str, exception: BaseException) -> "TargetRunOutcome":
        """Build the outcome of a target whose run could not complete."""
        return cls(target_id=target_id, exception=exception)

    @property
    def tests_passed(self) -> int:
        """Number of started tests that did not fail."""
        return self.tests_started - self.tests_failed
