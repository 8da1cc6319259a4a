"""Data types for discovered Python environments."""

from __future__ import annotations

import platform
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, cast

from semver import Version

from ..utils.path import identity_path


class Architecture(str, Enum):
    """Processor architecture an interpreter was built for."""

    X86 = "x86"
    X64 = "x64"
    ARM = "arm"
    ARM64 = "arm64"

    @classmethod
    def current(cls) -> Optional["Architecture"]:
        """Architecture of the running process, if recognized."""
        return _MACHINE_ARCHITECTURES.get(platform.machine().lower())


_MACHINE_ARCHITECTURES = {
    "x86": Architecture.X86,
    "i386": Architecture.X86,
    "i686": Architecture.X86,
    "amd64": Architecture.X64,
    "x86_64": Architecture.X64,
    "arm": Architecture.ARM,
    "armv7l": Architecture.ARM,
    "arm64": Architecture.ARM64,
    "aarch64": Architecture.ARM64,
}


@dataclass(frozen=True)
class PythonEnvironment:
    """A single discovered Python installation.

    Attributes:
        interpreter_path: Absolute path to the interpreter executable
        home: Installation prefix, if known
        dynamic_library_path: Shared library for embedding, if found
        language_version: Python version; patch is 0 when only major.minor is known
        architecture: Target architecture, when the discovery source reveals it

    The record is a point-in-time snapshot: ``interpreter_path`` must exist
    when the record is built and is never checked again.
    """

    interpreter_path: Path
    home: Optional[Path] = None
    dynamic_library_path: Optional[Path] = None
    language_version: Optional[Version] = None
    architecture: Optional[Architecture] = None

    def __post_init__(self) -> None:
        if not Path(self.interpreter_path).is_file():
            raise FileNotFoundError(
                f"Interpreter does not exist: {self.interpreter_path}"
            )

    @property
    def identity_key(self) -> str:
        """Key under which two records count as the same environment."""
        if self.dynamic_library_path is not None:
            return identity_path(self.dynamic_library_path)
        if self.home is not None:
            return identity_path(self.home)
        return identity_path(self.interpreter_path)

    def version_string(self, parts: int = 2) -> Optional[str]:
        """Format the version as ``major.minor`` (or more parts)."""
        if self.language_version is None:
            return None
        fields = (
            self.language_version.major,
            self.language_version.minor,
            self.language_version.patch,
        )
        return ".".join(str(part) for part in fields[:parts])

    def __str__(self) -> str:
        version = self.version_string() or "??"
        arch = self.architecture.value if self.architecture else "???"
        return f"{version}-{arch} @ {self.home if self.home else '??'}"


@dataclass(frozen=True)
class CondaEnvironment(PythonEnvironment):
    """A Python environment managed by conda, identified by its directory."""

    def __post_init__(self) -> None:
        if self.home is None:
            raise ValueError("Conda environments always have a home directory")
        super().__post_init__()

    @property
    def name(self) -> str:
        """Short name of the environment (its directory name)."""
        return cast(Path, self.home).name
