"""Cooperative cancellation for long-running enumerations."""

from __future__ import annotations

import threading
from typing import Iterable, Iterator, Optional, TypeVar

T = TypeVar("T")


class OperationCancelled(Exception):
    """Raised when an enumeration is cancelled between candidates.

    Not an error in the discovery sense: records yielded before
    cancellation remain valid.
    """


class CancellationToken:
    """Flag that can be set from any thread and polled by an enumeration."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled("Enumeration was cancelled")


def check_cancelled(token: Optional[CancellationToken]) -> None:
    """Raise OperationCancelled if ``token`` is set. ``None`` never cancels."""
    if token is not None:
        token.raise_if_cancelled()


def with_cancellation(
    items: Iterable[T], token: Optional[CancellationToken]
) -> Iterator[T]:
    """Yield from ``items``, checking ``token`` before each element."""
    for item in items:
        check_cancelled(token)
        yield item
