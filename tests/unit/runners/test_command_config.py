"""Tests for command runner configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from fanout_runner.runners.base import TargetRunRequest
from fanout_runner.runners.command import CommandRunner, CommandRunnerConfig


def test_accepts_known_placeholders() -> None:
    """Every supported placeholder is accepted."""
    config = CommandRunnerConfig(
        command=["run", "{target}", "{output}", "{application}", "{tests}"]
    )

    assert len(config.command) == 5


@pytest.mark.parametrize(
    "arg",
    ['{"serial": "x"}', "--device={serial}", "{}", "{0}"],
)
def test_rejects_unknown_placeholders(arg: str) -> None:
    """Braces that are not a known placeholder are rejected up front."""
    with pytest.raises(ValidationError, match="Unknown placeholder"):
        CommandRunnerConfig(command=["run", arg])


@pytest.mark.parametrize("arg", ["{target", "target}"])
def test_rejects_unbalanced_braces(arg: str) -> None:
    """Unbalanced braces are rejected with a hint about escaping."""
    with pytest.raises(ValidationError, match="write literal braces"):
        CommandRunnerConfig(command=["run", arg])


def test_escaped_braces_are_passed_literally() -> None:
    """Doubled braces end up as literal braces in the command."""
    runner = CommandRunner(
        config=CommandRunnerConfig(command=["run", '{{"serial": "{target}"}}'])
    )
    request = TargetRunRequest(
        target_id="dev1",
        application=Path("/app.apk"),
        tests=Path("/tests.apk"),
        output_dir=Path("/out/dev1"),
    )

    assert runner.build_command(request) == ["run", '{"serial": "dev1"}']
