"""Pytest configuration and shared fixtures."""

import os
import stat
from pathlib import Path
from typing import Callable
from unittest.mock import MagicMock

import pytest

from whichpython.discovery import (
    EnvironmentDetector,
    LinuxPlatform,
    MacOSPlatform,
    ProcessProbe,
    WindowsPlatform,
)


@pytest.fixture
def make_file() -> Callable[..., Path]:
    """Create a file (and its parent directories), optionally executable."""

    def _make_file(path: Path, content: str = "", executable: bool = True) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        if executable:
            mode = os.stat(path).st_mode
            os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _make_file


@pytest.fixture
def fake_probe() -> MagicMock:
    """A probe that never launches anything and learns nothing by default."""
    probe = MagicMock(spec=ProcessProbe)
    probe.version.return_value = None
    probe.search_path.return_value = []
    probe.library_candidates.return_value = []
    return probe


@pytest.fixture
def linux_detector(fake_probe) -> EnvironmentDetector:
    return EnvironmentDetector(LinuxPlatform(fake_probe))


@pytest.fixture
def windows_detector(fake_probe) -> EnvironmentDetector:
    return EnvironmentDetector(WindowsPlatform(fake_probe))


@pytest.fixture
def macos_detector(fake_probe) -> EnvironmentDetector:
    return EnvironmentDetector(MacOSPlatform(fake_probe))


@pytest.fixture
def unix_install(tmp_path, make_file) -> Path:
    """A Unix-style install prefix for Python 3.9.

    Creates:
        prefix/
            bin/python3.9
            bin/python3.9-config
            lib/libpython3.9.so
            lib/python3.9/
    """
    prefix = tmp_path / "prefix"
    make_file(prefix / "bin" / "python3.9")
    make_file(prefix / "bin" / "python3.9-config")
    make_file(prefix / "lib" / "libpython3.9.so", executable=False)
    (prefix / "lib" / "python3.9").mkdir()
    return prefix


@pytest.fixture
def conda_env(tmp_path, make_file) -> Callable[..., Path]:
    """Create a Unix conda environment directory for a given version."""

    def _conda_env(name: str, version: str = "3.10") -> Path:
        home = tmp_path / "envs" / name
        make_file(home / "bin" / f"python{version}")
        (home / "lib" / f"python{version}").mkdir(parents=True)
        return home

    return _conda_env
