"""Utility modules (path helpers)."""

from .path import expand_path, identity_path, split_search_path

__all__ = [
    "expand_path",
    "identity_path",
    "split_search_path",
]
