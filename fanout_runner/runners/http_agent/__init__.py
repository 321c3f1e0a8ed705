"""HTTP runner module."""

from fanout_runner.runners.http_agent.config import HttpRunnerConfig
from fanout_runner.runners.http_agent.manifest import http_manifest
from fanout_runner.runners.http_agent.runner import HttpRunner

__all__ = ["HttpRunner", "HttpRunnerConfig", "http_manifest"]
