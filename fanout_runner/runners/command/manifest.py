"""Command runner manifest."""

from fanout_runner.runners.command.config import CommandRunnerConfig
from fanout_runner.runners.command.runner import CommandRunner
from fanout_runner.runners.manifest import RunnerManifest

command_manifest = RunnerManifest(
    config_cls=CommandRunnerConfig,
    runner_factory=CommandRunner.from_config,
)
