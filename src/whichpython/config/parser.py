"""Configuration file parser for whichpython."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from dotenv import load_dotenv

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # Fallback for Python 3.10

from ..discovery.probe import DEFAULT_LIBRARY_TIMEOUT_MS, DEFAULT_VERSION_TIMEOUT_MS
from ..utils.path import expand_path

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path("~/.config/whichpython/config.toml")
CONFIG_ENV_VAR = "WHICHPYTHON_CONFIG"


@dataclass
class ProbeConfig:
    """Timeouts for interpreter probes."""

    version_timeout_ms: int = DEFAULT_VERSION_TIMEOUT_MS
    library_timeout_ms: int = DEFAULT_LIBRARY_TIMEOUT_MS


@dataclass
class SearchConfig:
    """Directory scanning configuration."""

    masks: List[str] = field(default_factory=list)  # Empty means platform defaults
    extra_dirs: List[Path] = field(default_factory=list)


@dataclass
class CondaConfig:
    """Conda environment discovery configuration."""

    manifest: Path = field(
        default_factory=lambda: expand_path("~/.conda/environments.txt")
    )
    system_roots: Optional[List[Path]] = None  # None means platform defaults


@dataclass
class DiscoveryConfig:
    """Complete whichpython configuration."""

    probe: ProbeConfig = field(default_factory=ProbeConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    conda: CondaConfig = field(default_factory=CondaConfig)

    # File the configuration was read from, if any
    source: Optional[Path] = None


def find_config_file(
    explicit: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[Path]:
    """Locate the configuration file.

    Args:
        explicit: Path given on the command line
        environ: Environment to read ``WHICHPYTHON_CONFIG`` from

    Returns:
        Path to an existing config file, or None
    """
    environ = os.environ if environ is None else environ
    if explicit is not None:
        candidate = expand_path(explicit)
    elif environ.get(CONFIG_ENV_VAR):
        candidate = expand_path(environ[CONFIG_ENV_VAR])
    else:
        candidate = expand_path(DEFAULT_CONFIG_FILE)

    if candidate.is_file():
        return candidate
    return None


def _int_setting(value: Any, default: int, name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid %s: %r", name, value)
        return default
    if number <= 0:
        logger.warning("Ignoring non-positive %s: %r", name, value)
        return default
    return number


def _table(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        logger.warning("Ignoring [%s]: expected a table, got %r", name, section)
        return {}
    return section


def _list_setting(value: Any, name: str) -> Optional[List[Any]]:
    if not isinstance(value, list):
        logger.warning("Ignoring %s: expected a list, got %r", name, value)
        return None
    return value


def _apply_data(config: DiscoveryConfig, data: Dict[str, Any]) -> None:
    probe_data = _table(data, "probe")
    if "version_timeout_ms" in probe_data:
        config.probe.version_timeout_ms = _int_setting(
            probe_data["version_timeout_ms"],
            config.probe.version_timeout_ms,
            "probe.version_timeout_ms",
        )
    if "library_timeout_ms" in probe_data:
        config.probe.library_timeout_ms = _int_setting(
            probe_data["library_timeout_ms"],
            config.probe.library_timeout_ms,
            "probe.library_timeout_ms",
        )

    search_data = _table(data, "search")
    if "masks" in search_data:
        masks = _list_setting(search_data["masks"], "search.masks")
        if masks is not None:
            config.search.masks = [str(mask) for mask in masks]
    if "extra_dirs" in search_data:
        extra_dirs = _list_setting(search_data["extra_dirs"], "search.extra_dirs")
        if extra_dirs is not None:
            config.search.extra_dirs = [
                expand_path(str(directory)) for directory in extra_dirs
            ]

    conda_data = _table(data, "conda")
    if conda_data.get("manifest"):
        config.conda.manifest = expand_path(str(conda_data["manifest"]))
    if "system_roots" in conda_data:
        roots = _list_setting(conda_data["system_roots"], "conda.system_roots")
        if roots is not None:
            config.conda.system_roots = [expand_path(str(root)) for root in roots]


def _apply_environment(config: DiscoveryConfig, environ: Mapping[str, str]) -> None:
    if environ.get("WHICHPYTHON_VERSION_TIMEOUT_MS"):
        config.probe.version_timeout_ms = _int_setting(
            environ["WHICHPYTHON_VERSION_TIMEOUT_MS"],
            config.probe.version_timeout_ms,
            "WHICHPYTHON_VERSION_TIMEOUT_MS",
        )
    if environ.get("WHICHPYTHON_LIBRARY_TIMEOUT_MS"):
        config.probe.library_timeout_ms = _int_setting(
            environ["WHICHPYTHON_LIBRARY_TIMEOUT_MS"],
            config.probe.library_timeout_ms,
            "WHICHPYTHON_LIBRARY_TIMEOUT_MS",
        )
    if environ.get("WHICHPYTHON_CONDA_MANIFEST"):
        config.conda.manifest = expand_path(environ["WHICHPYTHON_CONDA_MANIFEST"])


def load_config(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> DiscoveryConfig:
    """Load configuration from a TOML file and the environment.

    Values from ``.env`` (via python-dotenv) and the process environment
    override the file. A missing or malformed file means defaults.

    Args:
        path: Explicit config file
        environ: Environment mapping; ``os.environ`` after loading ``.env`` when omitted

    Returns:
        DiscoveryConfig with loaded or default configuration
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    config = DiscoveryConfig()

    config_file = find_config_file(path, environ)
    if config_file:
        try:
            with open(config_file, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning("Ignoring unreadable config %s: %s", config_file, e)
        else:
            _apply_data(config, data)
            config.source = config_file

    _apply_environment(config, environ)
    return config
