"""Abstract base classes for running the suite on a single target."""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from fanout_runner.models.outcome import TargetRunOutcome


@dataclass(frozen=True, kw_only=True)
class TargetRunRequest:
    """Everything a runner needs to execute the suite on one target."""

    target_id: str
    application: Path
    tests: Path
    output_dir: Path


@dataclass(frozen=True, kw_only=True)
class TargetRunner(ABC):
    """Executes the full suite on one target and reports its outcome.

    Implementations may raise any exception when the run cannot complete;
    the orchestrator converts it into a fault outcome for that target.
    """

    @abstractmethod
    async def run_on_target(self, request: TargetRunRequest) -> TargetRunOutcome:
        """Run the suite on ``request.target_id``.

        Args:
            request: Target id, input artifacts and the target's own output
                directory. Nothing may be written outside that directory.

        Returns:
            The outcome of the run on that target

        """


@dataclass(frozen=True, kw_only=True)
class PollingTargetRunner[T](TargetRunner):
    """Runner for targets that execute remotely and must be polled.

    Generic type T represents the dispatch state - whatever data the runner
    needs to pass from dispatch to poll. This could be a simple run ID string,
    or a more complex state object containing multiple identifiers.
    """

    timeout: float = 1800
    poll_interval: float = 5

    @abstractmethod
    async def dispatch(self, request: TargetRunRequest) -> T:
        """Start the suite on the target and return dispatch state."""

    @abstractmethod
    async def poll_status(
        self, request: TargetRunRequest, dispatch_state: T
    ) -> TargetRunOutcome | None:
        """Check if the run is complete and get its outcome.

        Returns:
            The outcome if complete, None if still running

        """

    async def run_on_target(self, request: TargetRunRequest) -> TargetRunOutcome:
        """Dispatch the run and wait for it to complete."""
        dispatch_state = await self.dispatch(request)
        return await self.wait_for_completion(request, dispatch_state)

    async def wait_for_completion(
        self, request: TargetRunRequest, dispatch_state: T
    ) -> TargetRunOutcome:
        """Poll until the run completes.

        Raises:
            TimeoutError: If the run doesn't complete within ``timeout``

        """
        deadline = asyncio.get_running_loop().time() + self.timeout

        while True:
            if (outcome := await self.poll_status(request, dispatch_state)) is not None:
                return outcome

            if asyncio.get_running_loop().time() >= deadline:
                raise TimeoutError(
                    f"Target {request.target_id} did not complete "
                    f"within {self.timeout} seconds"
                )

            await asyncio.sleep(self.poll_interval)
