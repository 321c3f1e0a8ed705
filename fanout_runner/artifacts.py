"""Identification of the application and test artifacts."""

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from fanout_runner.config import ConfigurationError


@dataclass(frozen=True, kw_only=True)
class ArtifactInfo:
    """Identifying names of the artifacts under test, used for logging."""

    application_package: str
    test_package: str


type ArtifactInspector = Callable[[Path, Path], ArtifactInfo]


def inspect_artifacts(application: Path, tests: Path) -> ArtifactInfo:
    """Resolve package names from the artifact file names.

    Raises:
        ConfigurationError: If either artifact is not a regular file or
            directory.

    """
    for artifact in (application, tests):
        if not (artifact.is_file() or artifact.is_dir()):
            raise ConfigurationError(f"Cannot inspect artifact: {artifact}")

    return ArtifactInfo(
        application_package=_package_name(application),
        test_package=_package_name(tests),
    )


def _package_name(artifact: Path) -> str:
    # "app-release.apk" -> "app-release", "suite.tar.gz" -> "suite"
    return artifact.name.split(".", 1)[0] or artifact.name
