"""
Minimal observable store.

State lives in plain attributes; ``set`` applies a batch of changes and then
notifies every subscriber once with the store itself.
"""

import logging
from typing import Callable, List

logger = logging.getLogger(__name__)

Listener = Callable[["Store"], None]


class Store:
    """Base class for small observable client-state stores."""

    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Registers a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set(self, **changes) -> None:
        for name, value in changes.items():
            if not hasattr(self, name):
                raise AttributeError(f"{type(self).__name__} has no state field '{name}'")
            setattr(self, name, value)
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Store listener failed")
