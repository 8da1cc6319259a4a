"""Discover installed Python environments on Windows, Linux and macOS.

Environments are found through the Windows registry, PATH, conda
manifests and short probes run against candidate interpreters. All
enumerations are lazy: nothing is listed or launched until the next
result is requested.

Probing runs candidate executables. Any file on PATH whose name matches
an interpreter mask may be launched, so scanning directories that
contain untrusted executables runs untrusted code.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence, Union

from .config import DiscoveryConfig, load_config
from .discovery import (
    Architecture,
    CancellationToken,
    CondaEnvironment,
    EnvironmentDetector,
    OperationCancelled,
    ProcessProbe,
    PythonEnvironment,
    aggregate,
    select_platform,
)
from .discovery.enumerators import (
    active_conda_environment,
    enumerate_conda,
    enumerate_directories,
    enumerate_path,
    enumerate_registry,
)
from .errors import (
    InterpreterError,
    InterpreterNotFoundError,
    InvalidInterpreterError,
    LibraryNotFoundError,
    VersionUndeterminedError,
)

__version__ = "0.5.0"


def create_detector(config: Optional[DiscoveryConfig] = None) -> EnvironmentDetector:
    """Detector for the host platform with the configured probe timeouts."""
    config = config or DiscoveryConfig()
    probe = ProcessProbe(
        version_timeout_ms=config.probe.version_timeout_ms,
        library_timeout_ms=config.probe.library_timeout_ms,
    )
    return EnvironmentDetector(select_platform(probe))


def _conda_sources(
    detector: EnvironmentDetector,
    config: DiscoveryConfig,
    cancellation: Optional[CancellationToken],
) -> Iterator[CondaEnvironment]:
    return enumerate_conda(
        detector,
        manifest=config.conda.manifest,
        system_roots=config.conda.system_roots,
        cancellation=cancellation,
    )


def enumerate_environments(
    cancellation: Optional[CancellationToken] = None,
    config: Optional[DiscoveryConfig] = None,
) -> Iterator[PythonEnvironment]:
    """All discoverable environments, without duplicates.

    Registry entries come first, then PATH, then configured extra
    directories, then conda environments.
    """
    config = config or DiscoveryConfig()
    detector = create_detector(config)
    masks = config.search.masks or None
    yield from aggregate(
        enumerate_registry(detector, cancellation=cancellation),
        enumerate_path(detector, masks=masks, cancellation=cancellation),
        enumerate_directories(
            config.search.extra_dirs, detector, masks, cancellation
        ),
        _conda_sources(detector, config, cancellation),
        cancellation=cancellation,
    )


def enumerate_conda_environments(
    cancellation: Optional[CancellationToken] = None,
    config: Optional[DiscoveryConfig] = None,
) -> Iterator[CondaEnvironment]:
    """Only conda-managed environments, without duplicates."""
    config = config or DiscoveryConfig()
    detector = create_detector(config)
    yield from aggregate(
        _conda_sources(detector, config, cancellation), cancellation=cancellation
    )


def enumerate_in_directories(
    directories: Iterable[Union[str, Path]],
    masks: Optional[Sequence[str]] = None,
    cancellation: Optional[CancellationToken] = None,
    config: Optional[DiscoveryConfig] = None,
) -> Iterator[PythonEnvironment]:
    """Environments whose interpreters live directly in ``directories``."""
    config = config or DiscoveryConfig()
    detector = create_detector(config)
    yield from aggregate(
        enumerate_directories(
            [Path(directory) for directory in directories],
            detector,
            masks or config.search.masks or None,
            cancellation,
        ),
        cancellation=cancellation,
    )


def detect_interpreter(
    path: Union[str, Path], config: Optional[DiscoveryConfig] = None
) -> Optional[PythonEnvironment]:
    """Best-effort detection of one interpreter; None when it is not a match."""
    return create_detector(config).detect(path)


def from_interpreter_checked(
    path: Union[str, Path], config: Optional[DiscoveryConfig] = None
) -> PythonEnvironment:
    """Verify one interpreter, raising an ``InterpreterError`` on failure."""
    return create_detector(config).detect_checked(path)


def detect_conda_environment(
    home: Union[str, Path], config: Optional[DiscoveryConfig] = None
) -> Optional[CondaEnvironment]:
    """Conda environment rooted at ``home``, if there is one."""
    return create_detector(config).detect_home(home)


def get_active_conda_environment(
    config: Optional[DiscoveryConfig] = None,
) -> Optional[CondaEnvironment]:
    """Conda environment named by ``CONDA_PREFIX``, if set and valid."""
    return active_conda_environment(create_detector(config))


__all__ = [
    "Architecture",
    "CancellationToken",
    "CondaEnvironment",
    "DiscoveryConfig",
    "InterpreterError",
    "InterpreterNotFoundError",
    "InvalidInterpreterError",
    "LibraryNotFoundError",
    "OperationCancelled",
    "PythonEnvironment",
    "VersionUndeterminedError",
    "create_detector",
    "detect_conda_environment",
    "detect_interpreter",
    "enumerate_conda_environments",
    "enumerate_environments",
    "enumerate_in_directories",
    "from_interpreter_checked",
    "get_active_conda_environment",
    "load_config",
]
