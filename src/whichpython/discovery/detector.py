"""Single-candidate detection of Python environments."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

from ..errors import (
    InterpreterNotFoundError,
    InvalidInterpreterError,
    LibraryNotFoundError,
    VersionUndeterminedError,
)
from .platforms import PlatformStrategy, select_platform
from .types import CondaEnvironment, PythonEnvironment

logger = logging.getLogger(__name__)


class EnvironmentDetector:
    """Turns one filesystem location into an environment record.

    Reporting policy: a record is only produced when its home or its
    dynamic library is known. A version alone is not enough.
    """

    def __init__(self, platform: Optional[PlatformStrategy] = None):
        """Initialize detector.

        Args:
            platform: Platform strategy; the host platform when omitted
        """
        self.platform = platform or select_platform()

    def detect(self, candidate: Union[str, Path]) -> Optional[PythonEnvironment]:
        """Detect an environment from an interpreter binary.

        Args:
            candidate: Path to a possible interpreter

        Returns:
            The environment, or None when the candidate is not a match
        """
        interpreter = Path(candidate)
        if not interpreter.is_file():
            logger.debug("Skipping %s: not a file", interpreter)
            return None
        interpreter = interpreter.absolute()

        version = self.platform.resolve_version(interpreter)
        if version is None and self.platform.requires_version:
            logger.debug("Skipping %s: version unknown", interpreter)
            return None

        home = self.platform.resolve_home(interpreter, version)
        library = self.platform.resolve_library(interpreter, home, version)

        if home is None and library is None:
            logger.debug("Skipping %s: neither home nor library found", interpreter)
            return None

        return PythonEnvironment(
            interpreter_path=interpreter,
            home=home,
            dynamic_library_path=library,
            language_version=version,
        )

    def detect_home(self, home: Union[str, Path]) -> Optional[CondaEnvironment]:
        """Detect a conda-style environment rooted at a directory.

        Args:
            home: Environment directory

        Returns:
            The environment, or None when the directory holds no interpreter
        """
        home = Path(home)
        if not home.is_dir():
            logger.debug("Skipping %s: not a directory", home)
            return None
        home = home.absolute()

        version = self.platform.version_from_home(home)
        interpreter = self.platform.conda_interpreter(home, version)
        if interpreter is None or not interpreter.is_file():
            logger.debug("Skipping %s: no interpreter", home)
            return None

        library = None
        if version is not None:
            library = self.platform.static_library(home, version)

        return CondaEnvironment(
            interpreter_path=interpreter,
            home=home,
            dynamic_library_path=library,
            language_version=version,
        )

    def detect_checked(self, candidate: Union[str, Path]) -> PythonEnvironment:
        """Verify that one specific file is a usable interpreter.

        Unlike ``detect`` this raises instead of returning None, so the
        caller can report why the file was rejected.

        Raises:
            InterpreterNotFoundError: If the file does not exist
            InvalidInterpreterError: If the path is not an executable file
            VersionUndeterminedError: If no version can be determined
            LibraryNotFoundError: If the platform requires a library and it is missing
        """
        interpreter = Path(candidate)
        if not interpreter.exists():
            raise InterpreterNotFoundError(interpreter)
        if not interpreter.is_file():
            raise InvalidInterpreterError(interpreter, "not a regular file")
        if not os.access(interpreter, os.X_OK):
            raise InvalidInterpreterError(interpreter)
        interpreter = interpreter.absolute()

        version = self.platform.resolve_version(interpreter)
        if version is None:
            raise VersionUndeterminedError(interpreter)

        home = self.platform.resolve_home(interpreter, version)
        library = self.platform.resolve_library(interpreter, home, version)
        if library is None and self.platform.requires_library:
            expected = (
                self.platform.expected_library_path(home, version) if home else None
            )
            raise LibraryNotFoundError(interpreter, expected)

        return PythonEnvironment(
            interpreter_path=interpreter,
            home=home,
            dynamic_library_path=library,
            language_version=version,
        )
