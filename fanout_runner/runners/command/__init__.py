"""Command runner module."""

from fanout_runner.runners.command.config import CommandRunnerConfig
from fanout_runner.runners.command.manifest import command_manifest
from fanout_runner.runners.command.runner import CommandRunner

__all__ = ["CommandRunner", "CommandRunnerConfig", "command_manifest"]
