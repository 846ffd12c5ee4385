"""Explicit subscriptions: signals that hand back disposers, and a teardown group.

Every listener registration (tick, resize, frame callbacks) returns a
``Disposer``. Owners collect disposers in a ``Subscriptions`` group and call
``dispose()`` once on teardown.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Disposer = Callable[[], None]


class Signal(Generic[T]):
    """A synchronous event with an ordered listener list."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._listeners: list[Callable[[T], None]] = []

    def connect(self, listener: Callable[[T], None]) -> Disposer:
        """Register a listener and return a disposer that unregisters it.

        The disposer is idempotent.
        """
        self._listeners.append(listener)

        def dispose() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return dispose

    def emit(self, value: T) -> None:
        """Call every listener in registration order."""
        # Copy so listeners may disconnect themselves while being called
        for listener in list(self._listeners):
            listener(value)

    def __len__(self) -> int:
        return len(self._listeners)


class Subscriptions:
    """Composite teardown: disposes registered disposers in reverse order."""

    def __init__(self) -> None:
        self._disposers: list[Disposer] = []

    def add(self, disposer: Disposer) -> Disposer:
        """Track a disposer; returns it for convenience."""
        self._disposers.append(disposer)
        return disposer

    def dispose(self) -> None:
        """Run every tracked disposer once. Safe to call repeatedly."""
        disposers, self._disposers = self._disposers, []
        for disposer in reversed(disposers):
            disposer()
        if disposers:
            logger.debug("Disposed %d subscriptions", len(disposers))

    def __len__(self) -> int:
        return len(self._disposers)
