"""Pure heuristics for versions, homes and library paths.

Nothing here launches a process; the only I/O is listing directories and
checking that files exist.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from semver import Version

logger = logging.getLogger(__name__)

_VERSION_TAG = re.compile(r"^(\d+)\.(\d+)")


def version_from_filename(name: str, patterns: Iterable[str]) -> Optional[Version]:
    """Extract ``major.minor`` from a file name; first matching pattern wins."""
    for pattern in patterns:
        match = re.match(pattern, name, re.IGNORECASE)
        if match:
            return Version(int(match.group(1)), int(match.group(2)))
    return None


def list_directory(directory: Path) -> List[str]:
    """Entry names of ``directory`` in sorted order; empty if unreadable."""
    try:
        return sorted(os.listdir(directory))
    except OSError:
        return []


def version_from_listing(directory: Path, pattern: str) -> Optional[Version]:
    """Lowest version embedded in the names of ``directory`` matching ``pattern``.

    When several versioned artifacts coexist (for example ``python39.dll``
    and ``python310.dll``) the minimum is taken.
    """
    if not pattern:
        return None
    versions = [
        version
        for version in (
            version_from_filename(name, (pattern,))
            for name in list_directory(directory)
        )
        if version is not None
    ]
    return min(versions) if versions else None


def expected_library(
    library_dir: Path,
    version: Version,
    templates: Sequence[str],
) -> Optional[Path]:
    """First library name from ``templates`` that exists in ``library_dir``."""
    for template in templates:
        candidate = library_dir / template.format(
            major=version.major, minor=version.minor
        )
        if candidate.is_file():
            return candidate
    return None


def has_library_suffix(path: Path, suffixes: Sequence[str]) -> bool:
    """Whether ``path`` carries one of ``suffixes``, allowing ``.so.1.0`` style tails."""
    lowered = [suffix.lower() for suffix in path.suffixes]
    return any(suffix.lower() in lowered for suffix in suffixes)


def find_versioned_library(
    library_dir: Path,
    version: Version,
    suffixes: Sequence[str],
) -> Optional[Path]:
    """Glob fallback: any ``libpython<M>.<m>*`` with an accepted suffix."""
    prefix = f"libpython{version.major}.{version.minor}"
    for name in list_directory(library_dir):
        if not name.startswith(prefix):
            continue
        candidate = library_dir / name
        if has_library_suffix(candidate, suffixes) and candidate.is_file():
            return candidate
    return None


def first_library(paths: Iterable[Path], suffixes: Sequence[str]) -> Optional[Path]:
    """First existing path with an accepted library extension."""
    for path in paths:
        if has_library_suffix(path, suffixes) and path.is_file():
            return path
    return None


def home_from_search_path(entries: Iterable[Path], version: Version) -> Optional[Path]:
    """Derive a home from ``sys.path`` entries of an interpreter.

    Looks for a ``lib/python<M>.<m>`` segment and returns everything in
    front of ``lib``.
    """
    segment = f"python{version.major}.{version.minor}"
    for entry in entries:
        parts = entry.parts
        for index in range(1, len(parts)):
            if parts[index].lower() != segment:
                continue
            if parts[index - 1].lower() in ("lib", "lib64"):
                home = Path(*parts[: index - 1])
                if home.is_dir():
                    return home
    return None


def parse_version_tag(tag: str) -> Optional[Version]:
    """Best-effort ``major.minor`` parse of a registry tag such as ``3.9-32``."""
    match = _VERSION_TAG.match(tag)
    if not match:
        logger.debug("Unparseable version tag %r", tag)
        return None
    return Version(int(match.group(1)), int(match.group(2)))
