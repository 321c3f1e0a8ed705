"""Command runner implementation."""

import asyncio
import logging
import os
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fanout_runner.models.document import OutcomeDocument
from fanout_runner.models.outcome import TargetRunOutcome
from fanout_runner.runners.base import TargetRunner, TargetRunRequest
from fanout_runner.runners.command.config import CommandRunnerConfig

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class CommandRunner(TargetRunner):
    """Runs the suite on a target by invoking a local command.

    The command is expected to write an outcome document to ``report_file``
    inside the target's output directory. A non-zero exit status alone is
    treated as failing tests; it is only a fault when no report was written.
    """

    config: CommandRunnerConfig

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: CommandRunnerConfig
    ) -> AsyncGenerator["CommandRunner", None]:
        """Create runner; it holds no resources between runs."""
        yield cls(config=config)

    def build_command(self, request: TargetRunRequest) -> Sequence[str]:
        """Substitute the request's values into the configured command."""
        values = {
            "target": request.target_id,
            "output": str(request.output_dir),
            "application": str(request.application),
            "tests": str(request.tests),
        }
        return [arg.format(**values) for arg in self.config.command]

    async def run_on_target(self, request: TargetRunRequest) -> TargetRunOutcome:
        """Run the command for one target and parse its outcome document."""
        request.output_dir.mkdir(parents=True, exist_ok=True)
        command = self.build_command(request)
        log.info("Running on target %s: %s", request.target_id, " ".join(command))

        process = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env={**os.environ, **self.config.env},
        )
        try:
            stdout, stderr = await process.communicate()
        except asyncio.CancelledError:
            process.kill()
            await process.wait()
            raise

        (request.output_dir / "stdout.log").write_bytes(stdout)
        (request.output_dir / "stderr.log").write_bytes(stderr)

        report = request.output_dir / self.config.report_file
        if not report.exists():
            if process.returncode != 0:
                raise RuntimeError(
                    f"Command failed for target {request.target_id} "
                    f"with exit code {process.returncode}: "
                    f"{stderr.decode(errors='replace').strip()}"
                )
            raise RuntimeError(
                f"Command for target {request.target_id} did not write {report}"
            )

        if process.returncode != 0:
            log.info(
                "Command for target %s exited with %d",
                request.target_id,
                process.returncode,
            )

        document = OutcomeDocument.model_validate_json(report.read_bytes())
        return document.to_outcome(request.target_id, request.output_dir)
