"""Report model built from a frozen ExecutionSummary.

Everything here except ``write_report`` is pure: the same summary always
yields the same report, ordered by target id, class name and method name.
"""

import re
import traceback
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from pydantic import Field

from fanout_runner.models.base import Model
from fanout_runner.models.outcome import (
    TargetRunOutcome,
    TestIdentity,
    TestResult,
    TestStatus,
)
from fanout_runner.models.summary import ExecutionSummary, TestClassNode

REPORT_FILE = "report.json"

_WORD = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")
_NON_ID_CHARS = re.compile(r"[^A-Za-z0-9]+")


class ReportFault(Model):
    """A fault split into a headline and its detail lines."""

    title: str
    body: Sequence[str] = Field(default_factory=list)


class TestView(Model):
    """One target's result for one test."""

    __test__ = False

    target_id: str
    class_name: str
    method_name: str
    class_simple_name: str
    pretty_method_name: str
    test_id: str
    status: TestStatus
    duration: float
    screenshots: Sequence[Path] = Field(default_factory=list)
    animated_gif: Path | None = None
    failure: ReportFault | None = None


class MethodView(Model):
    """One logical test with its result on every target that ran it."""

    method_name: str
    pretty_name: str
    test_id: str
    results: Sequence[TestView]


class ClassView(Model):
    """All tests of one class."""

    class_name: str
    simple_name: str
    tests: Sequence[MethodView]


class TargetView(Model):
    """Everything that happened on one target."""

    target_id: str
    name: str
    total_tests_run: str
    tests_passed: int
    tests_failed: int
    total_length: str
    started: str
    exception: ReportFault | None = None
    results: Sequence[TestView]


class ReportModel(Model):
    """Read-only model consumed by report renderers."""

    title: str
    started: str
    ended: str
    total_length: str
    total_tests: int
    total_success: int
    total_failure: int
    total_exceptions: int
    succeeded: bool
    exception: ReportFault | None = None
    targets: Sequence[TargetView]
    classes: Sequence[ClassView]


def format_timestamp(moment: datetime | None) -> str:
    """Format a moment for display, e.g. ``2024-05-01 03:04 PM``."""
    if moment is None:
        return ""
    return moment.strftime("%Y-%m-%d %I:%M %p")


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def format_elapsed(seconds: float) -> str:
    """Format a duration, e.g. ``2 minutes, 3 seconds``.

    Fractions of a second are truncated.
    """
    hours, remainder = divmod(max(int(seconds), 0), 3600)
    minutes, secs = divmod(remainder, 60)
    parts = [_plural(secs, "second")]
    if hours or minutes:
        parts.insert(0, _plural(minutes, "minute"))
    if hours:
        parts.insert(0, _plural(hours, "hour"))
    return ", ".join(parts)


def prettify_method_name(method_name: str) -> str:
    """Turn a test method name into words.

    ``testClickTwice_whenDisabled`` becomes ``Click Twice, When Disabled``
    and ``test_adds_numbers`` becomes ``Adds numbers``.
    """
    name = method_name
    if name.startswith("test") and (len(name) == 4 or not name[4].islower()):
        name = name[4:]

    if name.islower() or not any(c.isalpha() for c in name):
        words = [w for w in name.split("_") if w]
        return " ".join(words).capitalize() or method_name

    segments: list[str] = []
    for segment in name.split("_"):
        words = _WORD.findall(segment)
        if words:
            words[0] = words[0][:1].upper() + words[0][1:]
            segments.append(" ".join(words))
    return ", ".join(segments) or method_name


def anchor_id(identity: TestIdentity) -> str:
    """Stable id for a test, safe for use in URLs and markup."""
    raw = f"{identity.class_name}-{identity.method_name}"
    return _NON_ID_CHARS.sub("-", raw).strip("-")


def describe_fault(fault: BaseException | str | None) -> ReportFault | None:
    """Split an exception or failure text into headline and detail lines."""
    if fault is None:
        return None
    if isinstance(fault, BaseException):
        lines = [type(fault).__name__]
        if str(fault):
            lines[0] += f": {fault}"
        if fault.__traceback__ is not None:
            lines.extend(
                line
                for frame in traceback.format_tb(fault.__traceback__)
                for line in frame.rstrip().splitlines()
            )
    else:
        lines = fault.strip().splitlines() or [""]
    return ReportFault(title=lines[0], body=lines[1:])


def _relative(path: Path, output: Path | None) -> Path:
    if output is not None and path.is_relative_to(output):
        return path.relative_to(output)
    return path


def _test_view(
    target_id: str, identity: TestIdentity, result: TestResult, output: Path | None
) -> TestView:
    return TestView(
        target_id=target_id,
        class_name=identity.class_name,
        method_name=identity.method_name,
        class_simple_name=identity.simple_class_name,
        pretty_method_name=prettify_method_name(identity.method_name),
        test_id=anchor_id(identity),
        status=result.status,
        duration=result.duration,
        screenshots=[_relative(path, output) for path in result.screenshots],
        animated_gif=(
            _relative(result.animated_gif, output) if result.animated_gif else None
        ),
        failure=describe_fault(result.failure),
    )


def _target_view(outcome: TargetRunOutcome, output: Path | None) -> TargetView:
    return TargetView(
        target_id=outcome.target_id,
        name=outcome.device_name or outcome.target_id,
        total_tests_run=_plural(outcome.tests_started, "test"),
        tests_passed=outcome.tests_passed,
        tests_failed=outcome.tests_failed,
        total_length=format_elapsed(outcome.duration),
        started=format_timestamp(outcome.started),
        exception=describe_fault(outcome.exception),
        results=[
            _test_view(outcome.target_id, identity, outcome.tests[identity], output)
            for identity in sorted(outcome.tests)
        ],
    )


def _class_view(node: TestClassNode, output: Path | None) -> ClassView:
    return ClassView(
        class_name=node.class_name,
        simple_name=node.class_name.rpartition(".")[2],
        tests=[
            MethodView(
                method_name=identity.method_name,
                pretty_name=prettify_method_name(identity.method_name),
                test_id=anchor_id(identity),
                results=[
                    _test_view(target_id, identity, test.results[target_id], output)
                    for target_id in sorted(test.results)
                ],
            )
            for identity, test in sorted(node.tests.items())
        ],
    )


def build_report(summary: ExecutionSummary, output: Path | None = None) -> ReportModel:
    """Build the report model for a summary.

    Args:
        summary: Frozen summary of the execution
        output: Output root; artifact paths inside it are made relative

    """
    return ReportModel(
        title=summary.title,
        started=format_timestamp(summary.started_at),
        ended=format_timestamp(summary.ended_at),
        total_length=format_elapsed(summary.elapsed),
        total_tests=summary.total_tests,
        total_success=summary.total_success,
        total_failure=summary.total_failure,
        total_exceptions=summary.total_exceptions,
        succeeded=summary.succeeded,
        exception=describe_fault(summary.exception),
        targets=[
            _target_view(outcome, output)
            for outcome in sorted(summary.outcomes, key=lambda o: o.target_id)
        ],
        classes=[
            _class_view(summary.classes[name], output)
            for name in sorted(summary.classes)
        ],
    )


def write_report(report: ReportModel, output: Path) -> Path:
    """Write the report snapshot as JSON under ``output`` and return its path."""
    output.mkdir(parents=True, exist_ok=True)
    path = output / REPORT_FILE
    path.write_text(report.model_dump_json(indent=2))
    return path
