"""HTTP runner implementation."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

import aiohttp

from fanout_runner.models.outcome import TargetRunOutcome
from fanout_runner.runners.base import PollingTargetRunner, TargetRunRequest
from fanout_runner.runners.http_agent.config import HttpRunnerConfig
from fanout_runner.runners.http_agent.models import DispatchResponse, RunResponse

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class HttpRunner(PollingTargetRunner[str]):
    """Runs the suite through a remote target agent's HTTP API.

    The dispatch state is the run id assigned by the agent.
    """

    config: HttpRunnerConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: HttpRunnerConfig
    ) -> AsyncGenerator["HttpRunner", None]:
        """Create runner with managed session lifecycle."""
        headers = {"Accept": "application/json"}
        if config.token is not None:
            headers["Authorization"] = f"Bearer {config.token.get_secret_value()}"
        async with aiohttp.ClientSession(
            base_url=config.api_base_url,
            headers=headers,
        ) as session:
            yield cls(
                config=config,
                session=session,
                timeout=config.timeout,
                poll_interval=config.poll_interval,
            )

    async def dispatch(self, request: TargetRunRequest) -> str:
        """Ask the agent to start a run and return its run id."""
        payload = {
            "target": request.target_id,
            "application": str(request.application),
            "tests": str(request.tests),
        }
        log.info(
            "Dispatching run: api_base_url=%s, target=%s",
            self.config.api_base_url,
            request.target_id,
        )

        async with self.session.post("/runs", json=payload) as response:
            if response.status not in (200, 201):
                text = await response.text()
                raise RuntimeError(
                    f"Failed to dispatch run for target {request.target_id}: "
                    f"{response.status} {text}"
                )
            data = await response.json()

        return DispatchResponse.model_validate(data).run_id

    async def poll_status(
        self, request: TargetRunRequest, dispatch_state: str
    ) -> TargetRunOutcome | None:
        """Check if the run is complete and convert its outcome."""
        async with self.session.get(f"/runs/{dispatch_state}") as response:
            if response.status != 200:
                text = await response.text()
                raise RuntimeError(
                    f"Failed to get run {dispatch_state}: {response.status} {text}"
                )
            data = await response.json()

        run = RunResponse.model_validate(data)
        if run.status != "completed":
            log.info("Run %s still in status=%s", run.run_id, run.status)
            return None

        if run.outcome is None:
            raise RuntimeError(f"Run {run.run_id} completed without an outcome")

        return run.outcome.to_outcome(request.target_id, request.output_dir)
