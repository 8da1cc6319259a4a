"""Merging of enumerator results without duplicates."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional, Set, TypeVar

from .cancellation import CancellationToken, with_cancellation
from .types import PythonEnvironment

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=PythonEnvironment)


class Deduplicator:
    """Remembers identity keys seen during one enumeration.

    Create one per enumeration call; instances are never shared.
    """

    def __init__(self) -> None:
        self._seen: Set[str] = set()

    def admit(self, environment: PythonEnvironment) -> bool:
        """Record ``environment`` and return True if it was not seen before."""
        key = environment.identity_key
        if key in self._seen:
            logger.debug("Dropping duplicate %s (%s)", environment.interpreter_path, key)
            return False
        self._seen.add(key)
        return True

    def filter(self, environments: Iterable[E]) -> Iterator[E]:
        for environment in environments:
            if self.admit(environment):
                yield environment


def aggregate(
    *sources: Iterable[E],
    cancellation: Optional[CancellationToken] = None,
) -> Iterator[E]:
    """Chain ``sources`` in order, keeping the first record per identity key."""
    deduplicator = Deduplicator()
    for source in sources:
        yield from deduplicator.filter(with_cancellation(source, cancellation))
