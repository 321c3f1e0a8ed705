"""Tests for execution configuration and artifact inspection."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from fanout_runner.artifacts import inspect_artifacts
from fanout_runner.config import ConfigurationError, ExecutionConfig


@pytest.fixture
def application(tmp_path: Path) -> Path:
    """Create an application artifact."""
    path = tmp_path / "app-release.apk"
    path.write_bytes(b"app")
    return path


@pytest.fixture
def tests_artifact(tmp_path: Path) -> Path:
    """Create a test artifact."""
    path = tmp_path / "suite.tar.gz"
    path.write_bytes(b"tests")
    return path


class TestExecutionConfig:
    """Tests for ExecutionConfig."""

    def test_defaults(self, application: Path, tests_artifact: Path) -> None:
        """Title, output and timeout have defaults."""
        config = ExecutionConfig(application=application, tests=tests_artifact)

        assert config.title == "Test Execution"
        assert config.output == Path("fanout-output")
        assert config.target_timeout is None

    def test_rejects_non_positive_timeout(
        self, application: Path, tests_artifact: Path
    ) -> None:
        """A target timeout must be positive."""
        with pytest.raises(ValidationError):
            ExecutionConfig(
                application=application, tests=tests_artifact, target_timeout=0
            )

    def test_check_artifacts_passes(
        self, application: Path, tests_artifact: Path
    ) -> None:
        """Existing artifacts pass the check."""
        ExecutionConfig(application=application, tests=tests_artifact).check_artifacts()

    def test_check_artifacts_missing_application(
        self, tmp_path: Path, tests_artifact: Path
    ) -> None:
        """A missing application artifact is a configuration error."""
        config = ExecutionConfig(
            application=tmp_path / "nope.apk", tests=tests_artifact
        )

        with pytest.raises(ConfigurationError, match="nope.apk"):
            config.check_artifacts()

    def test_check_artifacts_missing_tests(
        self, application: Path, tmp_path: Path
    ) -> None:
        """A missing test artifact is a configuration error."""
        config = ExecutionConfig(application=application, tests=tmp_path / "nope.apk")

        with pytest.raises(ConfigurationError, match="test artifact"):
            config.check_artifacts()


class TestInspectArtifacts:
    """Tests for inspect_artifacts."""

    def test_resolves_package_names(
        self, application: Path, tests_artifact: Path
    ) -> None:
        """Package names are taken from the artifact names."""
        info = inspect_artifacts(application, tests_artifact)

        assert info.application_package == "app-release"
        assert info.test_package == "suite"

    def test_accepts_directories(self, tmp_path: Path, application: Path) -> None:
        """Unpacked artifacts are accepted too."""
        suite = tmp_path / "suite"
        suite.mkdir()

        assert inspect_artifacts(application, suite).test_package == "suite"

    def test_missing_artifact(self, tmp_path: Path, application: Path) -> None:
        """Inspecting a missing artifact is a configuration error."""
        with pytest.raises(ConfigurationError, match="Cannot inspect"):
            inspect_artifacts(application, tmp_path / "missing.apk")
