"""Fixtures for integration tests."""

from collections.abc import Generator
from pathlib import Path

import pytest
from aioresponses import aioresponses as aioresponses_cls

from fanout_runner.runners.base import TargetRunRequest


@pytest.fixture
def aioresponses() -> Generator[aioresponses_cls, None, None]:
    """Intercept aiohttp requests."""
    with aioresponses_cls() as mocked:
        yield mocked


@pytest.fixture
def run_request(tmp_path: Path) -> TargetRunRequest:
    """Create a request with existing artifacts and an output directory."""
    application = tmp_path / "app.apk"
    tests = tmp_path / "tests.apk"
    application.write_bytes(b"app")
    tests.write_bytes(b"tests")
    return TargetRunRequest(
        target_id="emulator-5554",
        application=application,
        tests=tests,
        output_dir=tmp_path / "output" / "emulator-5554",
    )
