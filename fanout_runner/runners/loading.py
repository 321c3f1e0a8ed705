"""Lookup of target runner plugins registered as entry points."""

from importlib.metadata import entry_points
from typing import Any

from fanout_runner.runners.manifest import RunnerManifest

ENTRY_POINT_GROUP = "fanout_runner.runners"


class RunnerNotFoundError(Exception):
    """No runner plugin is registered under the requested key."""


def load_runner_manifest(key: str) -> RunnerManifest[Any]:
    """Find the runner registered under ``key`` and import its manifest.

    Only the matching entry point is loaded, so a broken plugin does not
    affect runs using another one.

    Raises:
        RunnerNotFoundError: Naming the keys that are registered instead

    """
    entries = entry_points(group=ENTRY_POINT_GROUP)

    for entry in entries:
        if entry.name == key:
            manifest: RunnerManifest[Any] = entry.load()
            return manifest

    available = sorted(e.name for e in entries)
    raise RunnerNotFoundError(
        f"Runner '{key}' not found. Available runners: {available}"
    )
