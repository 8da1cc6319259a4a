"""Python environment discovery engine."""

from .aggregator import Deduplicator, aggregate
from .cancellation import CancellationToken, OperationCancelled, with_cancellation
from .detector import EnvironmentDetector
from .platforms import (
    LinuxPlatform,
    MacOSPlatform,
    PlatformStrategy,
    WindowsPlatform,
    select_platform,
)
from .probe import ProcessProbe, run_probe
from .specs import PLATFORM_SPECS
from .types import Architecture, CondaEnvironment, PythonEnvironment

__all__ = [
    "Architecture",
    "CancellationToken",
    "CondaEnvironment",
    "Deduplicator",
    "EnvironmentDetector",
    "LinuxPlatform",
    "MacOSPlatform",
    "OperationCancelled",
    "PLATFORM_SPECS",
    "PlatformStrategy",
    "ProcessProbe",
    "PythonEnvironment",
    "WindowsPlatform",
    "aggregate",
    "run_probe",
    "select_platform",
    "with_cancellation",
]
