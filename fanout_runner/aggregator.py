"""Accumulation and cross-target merging of per-target outcomes."""

import enum
import logging
import threading
import time
from collections.abc import Callable
from datetime import datetime, timezone
from types import MappingProxyType

from fanout_runner.models.outcome import TargetRunOutcome, TestIdentity, TestResult
from fanout_runner.models.summary import ExecutionSummary, TestClassNode, TestNode

log = logging.getLogger(__name__)

DEFAULT_TITLE = "Test Execution"


class LifecycleError(RuntimeError):
    """Raised when the aggregator is driven out of its lifecycle order."""


class BuilderState(enum.Enum):
    """Lifecycle states of a ResultAggregator."""

    NOT_STARTED = "not-started"
    STARTED = "started"
    ENDED = "ended"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ResultAggregator:
    """One-shot builder that folds target outcomes into an ExecutionSummary.

    ``add_result`` may be called concurrently from any number of producers;
    all state lives behind a single lock owned by the aggregator. A result
    reported again for the same target and test replaces the earlier one.
    Every lifecycle violation raises LifecycleError.
    """

    def __init__(
        self,
        title: str = DEFAULT_TITLE,
        *,
        wall_clock: Callable[[], datetime] = _utcnow,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._title = title
        self._wall_clock = wall_clock
        self._monotonic = monotonic
        self._lock = threading.Lock()
        self._state = BuilderState.NOT_STARTED
        self._started_at = datetime.min.replace(tzinfo=timezone.utc)
        self._start_instant = 0.0
        self._exception: BaseException | None = None
        self._outcomes: dict[str, TargetRunOutcome] = {}
        # class name -> test identity -> target id -> result
        self._classes: dict[str, dict[TestIdentity, dict[str, TestResult]]] = {}

    @property
    def state(self) -> BuilderState:
        """Current lifecycle state."""
        with self._lock:
            return self._state

    def start(self) -> None:
        """Record the start instant. Valid only once."""
        with self._lock:
            if self._state is not BuilderState.NOT_STARTED:
                raise LifecycleError(
                    f"Cannot start aggregator in state {self._state.value}"
                )
            self._started_at = self._wall_clock()
            self._start_instant = self._monotonic()
            self._state = BuilderState.STARTED

    def add_result(self, outcome: TargetRunOutcome) -> None:
        """Fold one target's outcome into the cross-target test tree."""
        with self._lock:
            if self._state is not BuilderState.STARTED:
                raise LifecycleError(
                    f"Cannot add result for target {outcome.target_id!r} "
                    f"in state {self._state.value}"
                )

            if outcome.target_id in self._outcomes:
                log.warning(
                    "Replacing earlier outcome for target %s", outcome.target_id
                )
            self._outcomes[outcome.target_id] = outcome

            for identity, result in outcome.tests.items():
                tests = self._classes.setdefault(identity.class_name, {})
                tests.setdefault(identity, {})[outcome.target_id] = result

    def set_exception(self, exception: BaseException) -> None:
        """Record the single top-level fault of the execution."""
        with self._lock:
            if self._state is BuilderState.ENDED:
                raise LifecycleError("Cannot set exception after aggregation ended")
            if self._exception is not None:
                raise LifecycleError("Top-level exception already set") from exception
            self._exception = exception

    def end(self) -> ExecutionSummary:
        """Compute totals and freeze the summary. Valid only once, after start."""
        with self._lock:
            if self._state is not BuilderState.STARTED:
                raise LifecycleError(
                    f"Cannot end aggregator in state {self._state.value}"
                )
            self._state = BuilderState.ENDED
            elapsed = self._monotonic() - self._start_instant
            ended_at = self._wall_clock()

            outcomes = tuple(
                self._outcomes[target_id] for target_id in sorted(self._outcomes)
            )
            total_tests = sum(o.tests_started for o in outcomes)
            total_failure = sum(o.tests_failed for o in outcomes)

            return ExecutionSummary(
                title=self._title,
                started_at=self._started_at,
                ended_at=ended_at,
                elapsed=elapsed,
                total_tests=total_tests,
                total_success=total_tests - total_failure,
                total_failure=total_failure,
                outcomes=outcomes,
                classes=self._freeze_classes(),
                exception=self._exception,
            )

    def _freeze_classes(self) -> MappingProxyType[str, TestClassNode]:
        classes: dict[str, TestClassNode] = {}
        for class_name in sorted(self._classes):
            tests = self._classes[class_name]
            classes[class_name] = TestClassNode(
                class_name=class_name,
                tests=MappingProxyType(
                    {
                        identity: TestNode(
                            identity=identity,
                            results=MappingProxyType(
                                {
                                    target_id: tests[identity][target_id]
                                    for target_id in sorted(tests[identity])
                                }
                            ),
                        )
                        for identity in sorted(tests)
                    }
                ),
            )
        return MappingProxyType(classes)
