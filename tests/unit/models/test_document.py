"""Tests for outcome document models."""

from datetime import datetime, timezone
from pathlib import Path

import pytest
from pydantic import ValidationError

from fanout_runner.models.document import OutcomeDocument
from fanout_runner.models.outcome import TestIdentity
from fanout_runner.testing.factories import OutcomeDocumentFactory, TestEntryFactory


def test_parses_json_document() -> None:
    """Parses a document as written by a target run."""
    document = OutcomeDocument.model_validate_json(
        """
        {
          "device_name": "Pixel 8",
          "started": "2024-05-01T15:04:00Z",
          "duration": 42.5,
          "tests": [
            {"class_name": "com.example.A", "method_name": "testOne",
             "status": "pass", "duration": 1.5},
            {"class_name": "com.example.A", "method_name": "testTwo",
             "status": "fail", "failure": "AssertionError",
             "screenshots": ["shots/two-1.png"], "animated_gif": "two.gif"}
          ]
        }
        """
    )

    assert document.device_name == "Pixel 8"
    assert document.started == datetime(2024, 5, 1, 15, 4, tzinfo=timezone.utc)
    assert len(document.tests) == 2


def test_rejects_unknown_status() -> None:
    """Only pass and fail are valid statuses."""
    with pytest.raises(ValidationError):
        OutcomeDocument.model_validate(
            {"tests": [{"class_name": "A", "method_name": "m", "status": "skip"}]}
        )


class TestToOutcome:
    """Tests for OutcomeDocument.to_outcome."""

    def test_counts_default_to_entries(self) -> None:
        """Started and failed counts are derived from the entries."""
        document = OutcomeDocumentFactory.build(
            tests=[
                TestEntryFactory.build(class_name="A", method_name="m1"),
                TestEntryFactory.build(class_name="A", method_name="m2", status="fail"),
                TestEntryFactory.build(class_name="B", method_name="m1"),
            ]
        )

        outcome = document.to_outcome("dev1", Path("/out/dev1"))

        assert outcome.target_id == "dev1"
        assert outcome.tests_started == 3
        assert outcome.tests_failed == 1
        assert outcome.tests[TestIdentity("A", "m2")].status == "fail"
        assert outcome.device_name == document.device_name

    def test_explicit_counts_win(self) -> None:
        """Explicit counts are kept even when entries disagree."""
        document = OutcomeDocumentFactory.build(
            tests_started=10,
            tests_failed=4,
            tests=[TestEntryFactory.build(class_name="A", method_name="m1")],
        )

        outcome = document.to_outcome("dev1", Path("/out/dev1"))

        assert (outcome.tests_started, outcome.tests_failed) == (10, 4)

    def test_resolves_artifacts_in_output_dir(self) -> None:
        """Artifact paths are resolved against the target output directory."""
        document = OutcomeDocumentFactory.build(
            tests=[
                TestEntryFactory.build(
                    class_name="A",
                    method_name="m1",
                    screenshots=[Path("shots/1.png")],
                    animated_gif=Path("m1.gif"),
                )
            ]
        )

        outcome = document.to_outcome("dev1", Path("/out/dev1"))

        result = outcome.tests[TestIdentity("A", "m1")]
        assert result.screenshots == (Path("/out/dev1/shots/1.png"),)
        assert result.animated_gif == Path("/out/dev1/m1.gif")

    def test_duplicate_entry_keeps_last(self) -> None:
        """A test listed twice keeps its last entry."""
        document = OutcomeDocumentFactory.build(
            tests=[
                TestEntryFactory.build(class_name="A", method_name="m1", status="fail"),
                TestEntryFactory.build(class_name="A", method_name="m1", status="pass"),
            ]
        )

        outcome = document.to_outcome("dev1", Path("/out/dev1"))

        assert outcome.tests_started == 1
        assert outcome.tests_failed == 0
        assert outcome.tests[TestIdentity("A", "m1")].status == "pass"


class TestCounts:
    """Tests for started and failed count consistency."""

    def test_rejects_more_failed_than_started(self) -> None:
        """A failed count above the started count is invalid."""
        with pytest.raises(ValidationError, match="exceeds tests_started"):
            OutcomeDocument.model_validate(
                {"tests_started": 1, "tests_failed": 5, "tests": []}
            )

    def test_rejects_failed_above_derived_started(self) -> None:
        """An explicit failed count is checked against the derived count."""
        with pytest.raises(ValidationError, match="exceeds tests_started"):
            OutcomeDocument.model_validate(
                {
                    "tests_failed": 2,
                    "tests": [
                        {"class_name": "A", "method_name": "m1", "status": "fail"}
                    ],
                }
            )

    def test_derived_counts_are_consistent(self) -> None:
        """Counts derived from duplicated entries follow the last entry."""
        document = OutcomeDocumentFactory.build(
            tests=[
                TestEntryFactory.build(class_name="A", method_name="m1", status="fail"),
                TestEntryFactory.build(class_name="A", method_name="m1", status="fail"),
                TestEntryFactory.build(class_name="A", method_name="m2"),
            ]
        )

        assert document.counts() == (2, 1)
