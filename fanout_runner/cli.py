"""CLI entry point for running a test suite across targets."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from fanout_runner.aggregator import DEFAULT_TITLE
from fanout_runner.config import (
    DEFAULT_OUTPUT_DIRECTORY,
    ConfigurationError,
    ExecutionConfig,
)
from fanout_runner.models.summary import ExecutionSummary
from fanout_runner.orchestrator import Orchestrator
from fanout_runner.report import build_report, format_elapsed, write_report
from fanout_runner.runners.loading import RunnerNotFoundError, load_runner_manifest

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_CONFIGURATION_ERROR = 2

STATUS_SYMBOLS = {
    "success": "✅",
    "failure": "❌",
    "error": "❗",
}


def target_status(exception: BaseException | None, tests_failed: int) -> str:
    """Classify a target's outcome as success, failure or error."""
    if exception is not None:
        return "error"
    return "failure" if tests_failed else "success"


def log_results_summary(log: logging.Logger, summary: ExecutionSummary) -> None:
    """Log a formatted summary of the outcome on every target."""
    log.info("=" * 80)
    log.info("%s Summary:", summary.title)
    log.info("=" * 80)

    for outcome in summary.outcomes:
        status = target_status(outcome.exception, outcome.tests_failed)
        log.info(
            "%s %s: %d passed, %d failed (%s)",
            STATUS_SYMBOLS[status],
            outcome.target_id,
            outcome.tests_passed,
            outcome.tests_failed,
            format_elapsed(outcome.duration),
        )
        if outcome.exception is not None:
            log.info("  Exception: %s", outcome.exception)

    for class_node in summary.classes.values():
        for test in class_node.tests.values():
            if failed := test.failed_targets:
                log.info("  Failed: %s on %s", test.identity, ", ".join(failed))

    if summary.exception is not None:
        log.info("Execution exception: %s", summary.exception)


def format_output(summary: ExecutionSummary) -> dict[str, Any]:
    """Format a summary for JSON output."""
    return {
        "title": summary.title,
        "total": summary.total_tests,
        "passed": summary.total_success,
        "failed": summary.total_failure,
        "exceptions": summary.total_exceptions,
        "succeeded": summary.succeeded,
        "elapsed": summary.elapsed,
        "exception": str(summary.exception) if summary.exception else None,
        "targets": [
            {
                "target": outcome.target_id,
                "status": target_status(outcome.exception, outcome.tests_failed),
                "started": outcome.tests_started,
                "failed": outcome.tests_failed,
                "exception": str(outcome.exception) if outcome.exception else None,
            }
            for outcome in summary.outcomes
        ],
    }


async def run(
    runner_key: str,
    runner_config_json: str,
    targets: Sequence[str],
    application: Path,
    tests: Path,
    output: Path = DEFAULT_OUTPUT_DIRECTORY,
    title: str = DEFAULT_TITLE,
    target_timeout: float | None = None,
) -> int:
    """Run the suite on all targets and return exit code."""
    log = logging.getLogger("fanout_runner")

    try:
        config = ExecutionConfig(
            title=title,
            application=application,
            tests=tests,
            output=output,
            target_timeout=target_timeout,
        )
        log.info("Loading runner: %s", runner_key)
        manifest = load_runner_manifest(runner_key)
        runner_config = manifest.config_cls.model_validate_json(runner_config_json)

        async with manifest.runner_factory(runner_config) as runner:
            orchestrator = Orchestrator(runner=runner, config=config)
            summary = await orchestrator.run(set(targets))
    except (ConfigurationError, RunnerNotFoundError, ValidationError) as e:
        log.error("Configuration error: %s", e)
        return EXIT_CONFIGURATION_ERROR

    log_results_summary(log, summary)

    exit_code = EXIT_SUCCESS if summary.succeeded else EXIT_FAILURE
    if summary.outcomes:
        try:
            path = write_report(build_report(summary, config.output), config.output)
        except OSError as e:
            log.error("Unable to write report: %s", e, exc_info=e)
            exit_code = EXIT_FAILURE
        else:
            log.info("Report written to %s", path)

    print(json.dumps(format_output(summary), indent=2))
    return exit_code


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Run a test suite on several targets and merge the results"
    )
    parser.add_argument(
        "--runner",
        required=True,
        help="Runner key (command, http)",
    )
    parser.add_argument(
        "--runner-config",
        default="{}",
        help="JSON configuration for the runner",
    )
    parser.add_argument(
        "--application",
        type=Path,
        required=True,
        help="Path to the application artifact under test",
    )
    parser.add_argument(
        "--tests",
        type=Path,
        required=True,
        help="Path to the test artifact",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_OUTPUT_DIRECTORY,
        help="Output directory, cleaned before execution",
    )
    parser.add_argument(
        "--target",
        dest="targets",
        action="append",
        default=[],
        help="Target identifier; repeat for each target",
    )
    parser.add_argument(
        "--title",
        default=DEFAULT_TITLE,
        help="Identifying title for this execution",
    )
    parser.add_argument(
        "--target-timeout",
        type=float,
        default=None,
        help="Seconds a single target may run before it is recorded as failed",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(
            runner_key=args.runner,
            runner_config_json=args.runner_config,
            targets=args.targets,
            application=args.application,
            tests=args.tests,
            output=args.output,
            title=args.title,
            target_timeout=args.target_timeout,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
