"""Frozen cross-target models produced when aggregation ends."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime

from fanout_runner.models.outcome import TargetRunOutcome, TestIdentity, TestResult


@dataclass(frozen=True, kw_only=True)
class TestNode:
    """All targets' results for one logical test, keyed by target id."""

    __test__ = False

    identity: TestIdentity
    results: Mapping[str, TestResult]

    @property
    def failed_targets(self) -> Sequence[str]:
        """Target ids on which this test failed, sorted."""
        return sorted(
            target_id
            for target_id, result in self.results.items()
            if result.status == "fail"
        )


@dataclass(frozen=True, kw_only=True)
class TestClassNode:
    """All tests declared by one class, keyed by identity."""

    __test__ = False

    class_name: str
    tests: Mapping[TestIdentity, TestNode]


@dataclass(frozen=True, kw_only=True)
class ExecutionSummary:
    """Snapshot of a whole execution across every target.

    Constructed once when aggregation ends and never mutated afterwards.
    Outcomes are ordered by target id and classes by class name so the
    snapshot is identical regardless of the order results arrived in.
    """

    title: str
    started_at: datetime
    ended_at: datetime
    elapsed: float
    total_tests: int
    total_success: int
    total_failure: int
    outcomes: Sequence[TargetRunOutcome]
    classes: Mapping[str, TestClassNode]
    exception: BaseException | None = None

    @property
    def target_faults(self) -> Sequence[TargetRunOutcome]:
        """Outcomes of targets whose run could not complete."""
        return tuple(o for o in self.outcomes if o.exception is not None)

    @property
    def total_exceptions(self) -> int:
        """Number of faults: one per faulted target plus any top-level fault."""
        return len(self.target_faults) + (1 if self.exception is not None else 0)

    @property
    def succeeded(self) -> bool:
        """Whether the execution finished without faults or test failures."""
        return self.total_exceptions == 0 and self.total_failure == 0
