"""Declarative per-platform discovery data.

This is DATA, not code. Platform variants in ``platforms.py`` read these
specs; adding a platform mostly means adding an entry here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple

# Probe scripts are passed to the candidate via ``-c``.
VERSION_SCRIPT = "import sys; print('%d.%d.%d' % sys.version_info[:3])"

SEARCH_PATH_SCRIPT = "import sys; print('\\n'.join(p for p in sys.path if p))"

UNIX_LIBRARY_SCRIPT = """\
import os, sys, sysconfig
v = sysconfig.get_config_var
for d in (v('LIBDIR'), v('LIBPL'), os.path.join(sys.base_prefix, 'lib')):
    for n in (v('LDLIBRARY'), v('INSTSONAME')):
        if d and n:
            print(os.path.join(d, n))
"""

WINDOWS_LIBRARY_SCRIPT = """\
import os, sys
name = 'python%d%d.dll' % sys.version_info[:2]
for d in (sys.base_prefix, os.path.dirname(sys.executable)):
    print(os.path.join(d, name))
"""


@dataclass(frozen=True)
class PlatformSpec:
    """Everything that differs between host platforms during discovery.

    Attributes:
        name: Platform identifier ("windows", "linux", "macos")
        executable_masks: Glob masks for interpreters found while listing directories
        executable_patterns: Regexes a matched name must also satisfy
        generic_names: Unversioned names whose version must be probed
        filename_version_patterns: Regexes capturing (major, minor) from an executable name
        library_listing_pattern: Regex capturing (major, minor) from a library file name
        library_dir: Directory below home that holds the dynamic library
        library_templates: Library names below ``library_dir``, highest priority first
        library_suffixes: Accepted library file extensions
        library_script: Probe script printing candidate library paths
        bin_dir_names: Conventional interpreter subdirectories of a home
        conda_interpreter: Interpreter below a conda home ({major}/{minor} placeholders)
        conda_system_roots: Well-known system-wide conda environment directories
        stdlib_listing_pattern: Regex capturing (major, minor) from a directory below ``library_dir``
        requires_version: Drop candidates whose version cannot be determined
        requires_library: Checked lookup fails when the library is missing
    """

    name: str
    executable_masks: Tuple[str, ...]
    executable_patterns: Tuple[str, ...]
    generic_names: Tuple[str, ...]
    filename_version_patterns: Tuple[str, ...]
    library_listing_pattern: str
    library_dir: str
    library_templates: Tuple[str, ...]
    library_suffixes: Tuple[str, ...]
    library_script: str
    bin_dir_names: Tuple[str, ...]
    conda_interpreter: str
    conda_system_roots: Tuple[str, ...] = field(default_factory=tuple)
    stdlib_listing_pattern: str = ""
    requires_version: bool = True
    requires_library: bool = False


PLATFORM_SPECS: Dict[str, PlatformSpec] = {
    "windows": PlatformSpec(
        name="windows",
        executable_masks=("python.exe",),
        executable_patterns=(r"^python\.exe$",),
        generic_names=("python.exe",),
        filename_version_patterns=(),
        library_listing_pattern=r"^python(\d)(\d+)\.dll$",
        library_dir=".",
        library_templates=("python{major}{minor}.dll",),
        library_suffixes=(".dll",),
        library_script=WINDOWS_LIBRARY_SCRIPT,
        bin_dir_names=("Scripts",),
        conda_interpreter="python.exe",
        conda_system_roots=(r"${PROGRAMDATA}\Anaconda3\envs",),
        requires_version=False,  # home is always the containing directory
        requires_library=True,
    ),
    "linux": PlatformSpec(
        name="linux",
        executable_masks=("python", "python3", "python[0-9].*"),
        executable_patterns=(r"^python\d?$", r"^python\d\.\d+m?$"),
        generic_names=("python", "python3", "python2"),
        filename_version_patterns=(r"^python(\d)\.(\d+)m?$",),
        library_listing_pattern=r"^libpython(\d)\.(\d+)m?\.so",
        library_dir="lib",
        library_templates=(
            "libpython{major}.{minor}.so",
            "libpython{major}.{minor}m.so",
            "libpython{major}.{minor}.so.1.0",
            "libpython{major}.{minor}m.so.1.0",
        ),
        library_suffixes=(".so",),
        library_script=UNIX_LIBRARY_SCRIPT,
        bin_dir_names=("bin",),
        conda_interpreter="bin/python{major}.{minor}",
        stdlib_listing_pattern=r"^python(\d)\.(\d+)$",
    ),
    "macos": PlatformSpec(
        name="macos",
        executable_masks=("python", "python3", "python[0-9].*"),
        executable_patterns=(r"^python\d?$", r"^python\d\.\d+m?$"),
        generic_names=("python", "python3", "python2"),
        filename_version_patterns=(r"^python(\d)\.(\d+)m?$",),
        library_listing_pattern=r"^libpython(\d)\.(\d+)m?\.dylib$",
        library_dir="lib",
        library_templates=(
            "libpython{major}.{minor}.dylib",
            "libpython{major}.{minor}m.dylib",
        ),
        library_suffixes=(".dylib",),
        library_script=UNIX_LIBRARY_SCRIPT,
        bin_dir_names=("bin",),
        conda_interpreter="bin/python{major}.{minor}",
        stdlib_listing_pattern=r"^python(\d)\.(\d+)$",
    ),
}


def get_platform_spec(name: str) -> PlatformSpec:
    """Get the discovery spec for a platform.

    Args:
        name: Platform name

    Returns:
        Platform specification

    Raises:
        ValueError: If the platform is not supported
    """
    if name not in PLATFORM_SPECS:
        supported = ", ".join(PLATFORM_SPECS.keys())
        raise ValueError(
            f"Platform '{name}' not supported. Supported platforms: {supported}"
        )

    return PLATFORM_SPECS[name]
