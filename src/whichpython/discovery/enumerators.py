"""Sources of candidate locations: directories, the registry, conda manifests.

Every enumerator is a generator; nothing touches the filesystem or
launches a process until the caller asks for the next record.
"""

from __future__ import annotations

import fnmatch
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Mapping, Optional, Sequence

from ..utils.path import split_search_path
from . import heuristics
from .cancellation import CancellationToken, check_cancelled
from .detector import EnvironmentDetector
from .types import Architecture, CondaEnvironment, PythonEnvironment

if sys.platform == "win32":
    import winreg

logger = logging.getLogger(__name__)

DEFAULT_CONDA_MANIFEST = Path("~/.conda/environments.txt")

_TAG_ARCHITECTURES = {
    "-32": Architecture.X86,
    "-64": Architecture.X64,
    "-arm64": Architecture.ARM64,
}


def enumerate_directories(
    directories: Iterable[Path],
    detector: EnvironmentDetector,
    masks: Optional[Sequence[str]] = None,
    cancellation: Optional[CancellationToken] = None,
) -> Iterator[PythonEnvironment]:
    """Detect environments from interpreters directly inside ``directories``.

    Args:
        directories: Directories to list (not recursively)
        detector: Detector to run on each matching file
        masks: Glob masks for file names; platform defaults when omitted
        cancellation: Checked before every candidate
    """
    platform = detector.platform
    masks = list(masks) if masks else platform.executable_masks
    explicit_masks = masks != platform.executable_masks

    for directory in directories:
        check_cancelled(cancellation)
        if not directory.is_dir():
            logger.debug("Skipping search directory %s: not a directory", directory)
            continue

        for name in heuristics.list_directory(directory):
            if not any(fnmatch.fnmatch(name, mask) for mask in masks):
                continue
            if not explicit_masks and not platform.accepts_executable_name(name):
                continue
            check_cancelled(cancellation)
            environment = detector.detect(directory / name)
            if environment is not None:
                yield environment


def enumerate_path(
    detector: EnvironmentDetector,
    path_value: Optional[str] = None,
    masks: Optional[Sequence[str]] = None,
    cancellation: Optional[CancellationToken] = None,
) -> Iterator[PythonEnvironment]:
    """Detect environments reachable through the PATH variable."""
    if path_value is None:
        path_value = os.environ.get("PATH", "")
    yield from enumerate_directories(
        split_search_path(path_value), detector, masks, cancellation
    )


@dataclass(frozen=True)
class CatalogEntry:
    """One ``PythonCore`` registry entry (PEP 514)."""

    tag: str
    install_path: Optional[str]
    executable_path: Optional[str] = None


class RegistryCatalog:
    """Installed Python versions recorded in the Windows registry."""

    ROOT = r"SOFTWARE\Python\PythonCore"

    def __init__(self, hives: Optional[Sequence[int]] = None):
        if hives is None:
            hives = (winreg.HKEY_LOCAL_MACHINE, winreg.HKEY_CURRENT_USER)
        self.hives = hives

    def entries(self) -> Iterator[CatalogEntry]:
        for hive in self.hives:
            try:
                root = winreg.OpenKey(hive, self.ROOT)
            except OSError:
                continue
            with root:
                for tag in _subkey_names(root):
                    entry = _read_entry(root, tag)
                    if entry is not None:
                        yield entry


def _subkey_names(key) -> List[str]:
    names = []
    index = 0
    while True:
        try:
            names.append(winreg.EnumKey(key, index))
        except OSError:
            return names
        index += 1


def _read_entry(root, tag: str) -> Optional[CatalogEntry]:
    try:
        install_key = winreg.OpenKey(root, tag + r"\InstallPath")
    except OSError:
        logger.debug("Registry entry %s has no InstallPath", tag)
        return None
    with install_key:
        return CatalogEntry(
            tag=tag,
            install_path=_string_value(install_key, ""),
            executable_path=_string_value(install_key, "ExecutablePath"),
        )


def _string_value(key, name: str) -> Optional[str]:
    try:
        value, _ = winreg.QueryValueEx(key, name)
    except OSError:
        return None
    return value if isinstance(value, str) and value else None


def default_catalog() -> Optional[RegistryCatalog]:
    """The host's software catalog, where one exists."""
    if sys.platform == "win32":
        return RegistryCatalog()
    return None


def _tag_architecture(tag: str) -> Optional[Architecture]:
    for suffix, architecture in _TAG_ARCHITECTURES.items():
        if tag.lower().endswith(suffix):
            return architecture
    return Architecture.current()


def enumerate_registry(
    detector: EnvironmentDetector,
    catalog: Optional[RegistryCatalog] = None,
    cancellation: Optional[CancellationToken] = None,
) -> Iterator[PythonEnvironment]:
    """Detect environments listed in the installed-software catalog.

    Entries without an install path or whose interpreter is missing are
    skipped. An unparseable version tag leaves the version unknown; the
    record is still reported since its home is known.
    """
    if catalog is None:
        catalog = default_catalog()
        if catalog is None:
            return

    platform = detector.platform
    for entry in catalog.entries():
        check_cancelled(cancellation)
        if not entry.install_path:
            continue
        home = Path(entry.install_path)
        if entry.executable_path:
            interpreter = Path(entry.executable_path)
        else:
            interpreter = home / platform.spec.executable_masks[0]
        if not interpreter.is_file():
            logger.debug("Skipping registry entry %s: %s missing", entry.tag, interpreter)
            continue

        version = heuristics.parse_version_tag(entry.tag)
        if version is None:
            version = platform.version_from_home(home)
        library = platform.static_library(home, version) if version else None

        yield PythonEnvironment(
            interpreter_path=interpreter,
            home=home,
            dynamic_library_path=library,
            language_version=version,
            architecture=_tag_architecture(entry.tag),
        )


def read_manifest(manifest: Path) -> List[Path]:
    """Environment roots listed one per line; blank lines are skipped.

    A missing manifest yields an empty list. Bytes that are not UTF-8 are
    kept the way the OS decodes file names, so one bad line cannot hide
    the others.
    """
    try:
        lines = manifest.read_text(
            encoding="utf-8", errors="surrogateescape"
        ).splitlines()
    except FileNotFoundError:
        return []
    except OSError as e:
        logger.debug("Cannot read conda manifest %s: %s", manifest, e)
        return []
    return [Path(line.strip()) for line in lines if line.strip()]


def conda_roots(
    manifest: Path,
    system_roots: Iterable[Path],
    cancellation: Optional[CancellationToken] = None,
) -> Iterator[Path]:
    """Manifest entries, then every environment under the system-wide roots."""
    yield from read_manifest(manifest)
    check_cancelled(cancellation)
    for root in system_roots:
        for name in heuristics.list_directory(root):
            candidate = root / name
            if candidate.is_dir():
                yield candidate


def enumerate_conda(
    detector: EnvironmentDetector,
    manifest: Optional[Path] = None,
    system_roots: Optional[Sequence[Path]] = None,
    cancellation: Optional[CancellationToken] = None,
) -> Iterator[CondaEnvironment]:
    """Detect conda environments from the user manifest and system roots."""
    if manifest is None:
        manifest = DEFAULT_CONDA_MANIFEST.expanduser()
    if system_roots is None:
        system_roots = detector.platform.conda_system_roots()

    for home in conda_roots(manifest, system_roots, cancellation):
        check_cancelled(cancellation)
        environment = detector.detect_home(home)
        if environment is not None:
            yield environment


def active_conda_environment(
    detector: EnvironmentDetector,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[CondaEnvironment]:
    """The conda environment named by ``CONDA_PREFIX``, if it is valid."""
    environ = os.environ if environ is None else environ
    prefix = environ.get("CONDA_PREFIX")
    if not prefix:
        return None
    try:
        return detector.detect_home(Path(prefix))
    except (OSError, ValueError) as e:
        logger.debug("Ignoring CONDA_PREFIX %r: %s", prefix, e)
        return None
