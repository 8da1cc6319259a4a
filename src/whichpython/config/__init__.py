"""Configuration management for whichpython."""

from .parser import (
    CondaConfig,
    DiscoveryConfig,
    ProbeConfig,
    SearchConfig,
    find_config_file,
    load_config,
)

__all__ = [
    "CondaConfig",
    "DiscoveryConfig",
    "ProbeConfig",
    "SearchConfig",
    "find_config_file",
    "load_config",
]
