"""Configuration for the command runner."""

import string
from collections.abc import Mapping, Sequence

from pydantic import BaseModel, Field, field_validator

PLACEHOLDERS = frozenset({"target", "output", "application", "tests"})


class CommandRunnerConfig(BaseModel):
    """Configuration for running the suite through a local command.

    Each argument may use the ``{target}``, ``{output}``, ``{application}``
    and ``{tests}`` placeholders. Literal braces are written as ``{{`` and
    ``}}``.
    """

    command: Sequence[str] = Field(..., min_length=1)
    report_file: str = "outcome.json"
    env: Mapping[str, str] = Field(default_factory=dict)

    @field_validator("command")
    @classmethod
    def check_placeholders(cls, command: Sequence[str]) -> Sequence[str]:
        for arg in command:
            try:
                fields = [
                    f for _, f, _, _ in string.Formatter().parse(arg) if f is not None
                ]
            except ValueError as e:
                raise ValueError(
                    f"Invalid argument template {arg!r}: {e}; "
                    "write literal braces as '{{' and '}}'"
                ) from e
            unknown = sorted(set(fields) - PLACEHOLDERS)
            if unknown:
                raise ValueError(
                    f"Unknown placeholder(s) {unknown} in argument {arg!r}; "
                    f"expected any of {sorted(PLACEHOLDERS)}"
                )
        return command
