"""Manifest a runner plugin exposes through its entry point."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass

from pydantic import BaseModel

from fanout_runner.runners.base import TargetRunner


@dataclass(frozen=True, kw_only=True)
class RunnerManifest[ConfigT: BaseModel]:
    """How to configure and create one kind of target runner.

    ``config_cls`` validates the ``--runner-config`` JSON. ``runner_factory``
    turns the validated config into a context manager that yields a runner
    for the whole execution and releases its resources afterwards.
    """

    config_cls: type[ConfigT]
    runner_factory: Callable[[ConfigT], AbstractAsyncContextManager[TargetRunner]]
