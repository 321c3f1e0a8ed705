"""Test factories for generating test data."""

from collections.abc import Mapping

from polyfactory import Use
from polyfactory.factories import DataclassFactory
from polyfactory.factories.pydantic_factory import ModelFactory

from fanout_runner.models.document import OutcomeDocument, TestEntry
from fanout_runner.models.outcome import (
    TargetRunOutcome,
    TestIdentity,
    TestResult,
    TestStatus,
)


class TestResultFactory(DataclassFactory[TestResult]):
    """Factory for TestResult."""

    __test__ = False
    __model__ = TestResult

    status = "pass"
    failure = None
    screenshots = ()
    animated_gif = None


def build_outcome(
    target_id: str,
    tests: Mapping[tuple[str, str], TestStatus] | None = None,
    *,
    tests_started: int | None = None,
    tests_failed: int | None = None,
    exception: BaseException | None = None,
) -> TargetRunOutcome:
    """Build an outcome from ``{(class_name, method_name): status}``.

    Started and failed counts follow the statuses unless given explicitly.
    """
    results = {
        TestIdentity(class_name, method_name): TestResultFactory.build(status=status)
        for (class_name, method_name), status in (tests or {}).items()
    }
    failed = sum(1 for result in results.values() if result.status == "fail")
    return TargetRunOutcome(
        target_id=target_id,
        tests_started=len(results) if tests_started is None else tests_started,
        tests_failed=failed if tests_failed is None else tests_failed,
        exception=exception,
        tests=results,
    )


class TestEntryFactory(ModelFactory[TestEntry]):
    """Factory for TestEntry."""

    __test__ = False

    status = "pass"
    failure = None
    screenshots = Use(list)
    animated_gif = None


class OutcomeDocumentFactory(ModelFactory[OutcomeDocument]):
    """Factory for OutcomeDocument."""

    tests_started = None
    tests_failed = None
    tests = Use(list)
