"""Path helpers shared by discovery and configuration."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional, Union


def identity_path(path: Union[str, Path]) -> str:
    """Normalize a path for equality checks.

    Resolves symlinks and folds case where the filesystem does, so the
    same file reached through two routes compares equal.

    Examples:
        >>> identity_path("/usr/local/../lib/libpython3.9.so")
        '/usr/lib/libpython3.9.so'
    """
    return os.path.normcase(os.path.realpath(os.fspath(path)))


def expand_path(path: Union[str, Path]) -> Path:
    """Expand ``~`` and environment variables in a configured path."""
    return Path(os.path.expandvars(os.path.expanduser(os.fspath(path))))


def split_search_path(value: Optional[str]) -> List[Path]:
    """Split a PATH-like value on the platform separator.

    Empty entries are dropped; order is preserved.

    Examples:
        >>> split_search_path("/usr/bin:/bin::")  # on POSIX
        [PosixPath('/usr/bin'), PosixPath('/bin')]
    """
    if not value:
        return []
    return [Path(entry) for entry in value.split(os.pathsep) if entry.strip()]
