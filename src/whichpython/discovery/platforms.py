"""Per-platform capabilities used by the detector.

One ``PlatformStrategy`` is selected for the host at startup and injected
into ``EnvironmentDetector``, so the detection algorithm itself never
branches on the operating system.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from pathlib import Path
from typing import List, Optional

from semver import Version

from . import heuristics
from .probe import ProcessProbe
from .specs import PlatformSpec, get_platform_spec

logger = logging.getLogger(__name__)


class PlatformStrategy:
    """How versions, homes and libraries are resolved on one platform.

    Subclasses override the steps whose approach differs; the data that
    merely varies (names, masks, suffixes) comes from the ``PlatformSpec``.
    """

    def __init__(self, spec: PlatformSpec, probe: Optional[ProcessProbe] = None):
        self.spec = spec
        self.probe = probe or ProcessProbe()
        self._executable_patterns = [
            re.compile(pattern, re.IGNORECASE) for pattern in spec.executable_patterns
        ]

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def requires_version(self) -> bool:
        return self.spec.requires_version

    @property
    def requires_library(self) -> bool:
        return self.spec.requires_library

    @property
    def executable_masks(self) -> List[str]:
        return list(self.spec.executable_masks)

    def accepts_executable_name(self, name: str) -> bool:
        """Whether a name matched by a mask really looks like an interpreter."""
        return any(pattern.match(name) for pattern in self._executable_patterns)

    def is_generic_name(self, name: str) -> bool:
        return name.lower() in self.spec.generic_names

    def library_dir(self, home: Path) -> Path:
        return home / self.spec.library_dir

    def home_candidates(self, interpreter: Path) -> List[Path]:
        """Directories that may be the home, most likely first."""
        directory = interpreter.parent
        candidates = [directory]
        if directory.name.lower() in [name.lower() for name in self.spec.bin_dir_names]:
            candidates.append(directory.parent)
        return candidates

    def library_version(self, home: Path) -> Optional[Version]:
        """Lowest version among the versioned libraries in a home directory."""
        return heuristics.version_from_listing(
            self.library_dir(home), self.spec.library_listing_pattern
        )

    def version_from_home(self, home: Path) -> Optional[Version]:
        """Version inferred from the artifacts present in a home directory.

        Falls back to the standard library directory names, which is only
        reliable for an environment root holding a single Python.
        """
        version = self.library_version(home)
        if version is None:
            version = heuristics.version_from_listing(
                self.library_dir(home), self.spec.stdlib_listing_pattern
            )
        return version

    def resolve_version(self, interpreter: Path) -> Optional[Version]:
        """Filename first, then a probe for generic names, then neighboring libraries.

        Standard library directories are not consulted: a shared prefix
        such as ``/usr`` may hold several of them.
        """
        version = heuristics.version_from_filename(
            interpreter.name, self.spec.filename_version_patterns
        )
        if version is not None:
            return version

        if self.is_generic_name(interpreter.name):
            version = self.probe.version(interpreter)
            if version is not None:
                return version

        for home in self.home_candidates(interpreter):
            version = self.library_version(home)
            if version is not None:
                return version
        return None

    def is_home(self, directory: Path, version: Version) -> bool:
        """Whether ``directory`` holds the standard library or library for ``version``."""
        library_dir = self.library_dir(directory)
        stdlib = library_dir / f"python{version.major}.{version.minor}"
        if stdlib.is_dir():
            return True
        return self.static_library(directory, version) is not None

    def resolve_home(
        self, interpreter: Path, version: Optional[Version]
    ) -> Optional[Path]:
        """Own directory, then the parent of a ``bin`` directory, then ``sys.path``."""
        if version is None:
            return None
        for candidate in self.home_candidates(interpreter):
            if self.is_home(candidate, version):
                return candidate
        logger.debug("No home next to %s, asking the interpreter", interpreter)
        return heuristics.home_from_search_path(
            self.probe.search_path(interpreter), version
        )

    def static_library(self, home: Path, version: Version) -> Optional[Path]:
        """Library found from naming conventions alone."""
        library_dir = self.library_dir(home)
        library = heuristics.expected_library(
            library_dir, version, self.spec.library_templates
        )
        if library is None:
            library = heuristics.find_versioned_library(
                library_dir, version, self.spec.library_suffixes
            )
        return library

    def expected_library_path(self, home: Path, version: Version) -> Path:
        """Highest-priority library name, whether or not it exists."""
        return self.library_dir(home) / self.spec.library_templates[0].format(
            major=version.major, minor=version.minor
        )

    def resolve_library(
        self,
        interpreter: Path,
        home: Optional[Path],
        version: Optional[Version],
    ) -> Optional[Path]:
        """Static heuristics first, then ask the interpreter itself."""
        if home is not None and version is not None:
            library = self.static_library(home, version)
            if library is not None:
                return library
        return heuristics.first_library(
            self.probe.library_candidates(interpreter, self.spec.library_script),
            self.spec.library_suffixes,
        )

    def conda_interpreter(self, home: Path, version: Optional[Version]) -> Optional[Path]:
        template = self.spec.conda_interpreter
        if "{" in template:
            if version is None:
                return None
            template = template.format(major=version.major, minor=version.minor)
        return home / template

    def conda_system_roots(self) -> List[Path]:
        return [
            Path(os.path.expandvars(root))
            for root in self.spec.conda_system_roots
            if "$" not in os.path.expandvars(root)
        ]


class WindowsPlatform(PlatformStrategy):
    """Registry-driven platform: the home is the interpreter's directory."""

    def __init__(self, probe: Optional[ProcessProbe] = None):
        super().__init__(get_platform_spec("windows"), probe)

    def home_candidates(self, interpreter: Path) -> List[Path]:
        return [interpreter.parent]

    def resolve_home(
        self, interpreter: Path, version: Optional[Version]
    ) -> Optional[Path]:
        return interpreter.parent


class LinuxPlatform(PlatformStrategy):
    def __init__(self, probe: Optional[ProcessProbe] = None):
        super().__init__(get_platform_spec("linux"), probe)


class MacOSPlatform(PlatformStrategy):
    """Unix layout with ``.dylib`` libraries and framework builds."""

    def __init__(self, probe: Optional[ProcessProbe] = None):
        super().__init__(get_platform_spec("macos"), probe)

    def static_library(self, home: Path, version: Version) -> Optional[Path]:
        library = super().static_library(home, version)
        if library is not None:
            return library
        # Framework builds: Python.framework/Versions/<M>.<m>/Python
        framework_library = home / "Python"
        if home.name == f"{version.major}.{version.minor}" and framework_library.is_file():
            return framework_library
        return None


def select_platform(
    probe: Optional[ProcessProbe] = None,
    system: Optional[str] = None,
) -> PlatformStrategy:
    """Pick the strategy for ``system`` (defaults to the host platform).

    Args:
        probe: Probe to inject, defaults to one with default timeouts
        system: ``sys.platform`` style identifier

    Returns:
        The platform strategy
    """
    system = system or sys.platform
    if system.startswith("win"):
        return WindowsPlatform(probe)
    if system == "darwin":
        return MacOSPlatform(probe)
    return LinuxPlatform(probe)
