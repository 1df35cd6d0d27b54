"""Plain fan-out notification used for invalidation and edit warnings."""

from __future__ import annotations

from typing import Callable


class Signal:
    """Synchronous fan-out to connected callbacks.

    No queuing and no backpressure: ``emit`` calls every listener in
    connection order before returning. Coalescing repeated emissions is
    up to the consumer.
    """

    def __init__(self) -> None:
        self._listeners: list[Callable] = []

    def connect(self, callback: Callable) -> Callable:
        """Register *callback*. Returns it, so this also works as a decorator."""
        self._listeners.append(callback)
        return callback

    def disconnect(self, callback: Callable) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def emit(self, *args) -> None:
        for callback in list(self._listeners):
            callback(*args)

    def __len__(self) -> int:
        return len(self._listeners)
