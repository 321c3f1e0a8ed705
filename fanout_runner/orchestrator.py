"""Orchestrator fanning a test suite out across execution targets."""

import asyncio
import logging
import re
import shutil
from collections.abc import Callable, Collection, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from fanout_runner.aggregator import ResultAggregator
from fanout_runner.artifacts import ArtifactInspector, inspect_artifacts
from fanout_runner.config import ConfigurationError, ExecutionConfig
from fanout_runner.models.outcome import TargetRunOutcome
from fanout_runner.models.summary import ExecutionSummary
from fanout_runner.runners.base import TargetRunner, TargetRunRequest

log = logging.getLogger(__name__)

_UNSAFE_PATH_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def target_output_dirs(output: Path, targets: Collection[str]) -> Mapping[str, Path]:
    """Map each target id to its own subdirectory of ``output``.

    Raises:
        ConfigurationError: If two target ids map to the same directory

    """
    dirs: dict[str, Path] = {}
    seen: dict[str, str] = {}
    for target_id in sorted(targets):
        name = _UNSAFE_PATH_CHARS.sub("_", target_id) or "_"
        if name in seen:
            raise ConfigurationError(
                f"Targets {seen[name]!r} and {target_id!r} share output "
                f"directory {name!r}"
            )
        seen[name] = target_id
        dirs[target_id] = output / name
    return dirs


def clean_output(output: Path) -> None:
    """Remove everything a previous execution left under ``output``."""
    try:
        shutil.rmtree(output)
    except FileNotFoundError:
        pass
    except OSError as e:
        raise ConfigurationError(f"Unable to clean output directory: {output}") from e


@dataclass(frozen=True, kw_only=True)
class Orchestrator:
    """Runs the suite on every target and aggregates the outcomes."""

    runner: TargetRunner
    config: ExecutionConfig
    inspector: ArtifactInspector = inspect_artifacts
    aggregator_factory: Callable[[str], ResultAggregator] = ResultAggregator

    async def run(self, targets: Collection[str]) -> ExecutionSummary:
        """Run the suite on all targets.

        A single target is run directly in the caller's task; several
        targets each get their own task and are all awaited before the
        summary is built. Faults of one target are recorded on its outcome.
        Faults of the orchestration itself are recorded on the summary.

        Raises:
            ConfigurationError: If inputs are missing or invalid; raised
                before any target is dispatched

        """
        self.config.check_artifacts()
        aggregator = self.aggregator_factory(self.config.title)

        if not targets:
            log.info("No targets.")
            aggregator.start()
            return aggregator.end()

        output_dirs = target_output_dirs(self.config.output, targets)
        log.info("Executing on %d target(s).", len(output_dirs))
        clean_output(self.config.output)

        info = self.inspector(self.config.application, self.config.tests)
        log.debug("%s in %s", info.application_package, self.config.application)
        log.debug("%s in %s", info.test_package, self.config.tests)

        aggregator.start()
        try:
            if len(output_dirs) == 1:
                [(target_id, output_dir)] = output_dirs.items()
                await self._run_target(target_id, output_dir, aggregator)
            else:
                results = await asyncio.gather(
                    *(
                        self._run_target(target_id, output_dir, aggregator)
                        for target_id, output_dir in output_dirs.items()
                    ),
                    return_exceptions=True,
                )
                self._raise_escaped(results)
        except Exception as e:
            log.error("Execution failed: %s", e, exc_info=e)
            aggregator.set_exception(e)

        return aggregator.end()

    def _raise_escaped(self, results: Sequence[object]) -> None:
        """Re-raise the first exception that escaped a target task."""
        for result in results:
            if isinstance(result, BaseException):
                raise result

    async def _run_target(
        self, target_id: str, output_dir: Path, aggregator: ResultAggregator
    ) -> None:
        """Run the suite on one target and fold its outcome, capturing faults."""
        request = TargetRunRequest(
            target_id=target_id,
            application=self.config.application,
            tests=self.config.tests,
            output_dir=output_dir,
        )
        try:
            outcome = await self._run_with_timeout(request)
            if outcome.target_id != target_id:
                raise RuntimeError(
                    f"Runner reported outcome for {outcome.target_id!r} "
                    f"instead of {target_id!r}"
                )
        except asyncio.CancelledError as e:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            # Cancelled by the runner itself, not by our caller
            log.error("Target %s was cancelled: %s", target_id, e, exc_info=e)
            outcome = TargetRunOutcome.from_fault(target_id, e)
        except Exception as e:
            log.error("Target %s failed: %s", target_id, e, exc_info=e)
            outcome = TargetRunOutcome.from_fault(target_id, e)
        else:
            log.info(
                "Target completed: target=%s started=%d failed=%d",
                target_id,
                outcome.tests_started,
                outcome.tests_failed,
            )

        aggregator.add_result(outcome)

    async def _run_with_timeout(self, request: TargetRunRequest) -> TargetRunOutcome:
        timeout = self.config.target_timeout
        try:
            async with asyncio.timeout(timeout) as deadline:
                return await self.runner.run_on_target(request)
        except TimeoutError as e:
            if deadline.expired():
                raise TimeoutError(
                    f"Target {request.target_id} did not complete "
                    f"within {timeout} seconds"
                ) from e
            raise
