"""HTTP runner manifest."""

from fanout_runner.runners.http_agent.config import HttpRunnerConfig
from fanout_runner.runners.http_agent.runner import HttpRunner
from fanout_runner.runners.manifest import RunnerManifest

http_manifest = RunnerManifest(
    config_cls=HttpRunnerConfig,
    runner_factory=HttpRunner.from_config,
)
