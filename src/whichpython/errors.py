"""Errors raised by the checked interpreter lookup.

Open-ended enumeration never raises these: a candidate that fails any
check is simply left out of the results.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class InterpreterError(Exception):
    """Base class for a definitive "this is not a usable interpreter" verdict."""

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{reason}: {self.path}")


class InterpreterNotFoundError(InterpreterError, FileNotFoundError):
    """The interpreter file does not exist."""

    def __init__(self, path: Union[str, Path]):
        super().__init__(path, "Interpreter file does not exist")


class InvalidInterpreterError(InterpreterError):
    """The path exists but is not an executable file."""

    def __init__(self, path: Union[str, Path], detail: str = "not an executable file"):
        super().__init__(path, f"Invalid interpreter ({detail})")


class VersionUndeterminedError(InterpreterError):
    """No Python version could be determined for the interpreter."""

    def __init__(self, path: Union[str, Path]):
        super().__init__(path, "Unable to determine Python version")


class LibraryNotFoundError(InterpreterError):
    """The dynamic library expected next to the interpreter is missing."""

    def __init__(self, path: Union[str, Path], expected: Optional[Path] = None):
        self.expected = expected
        reason = "Python dynamic library not found"
        if expected is not None:
            reason += f" (expected {expected})"
        super().__init__(path, reason)
