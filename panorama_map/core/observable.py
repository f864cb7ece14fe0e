"""Explicit observer interface for state containers.

State containers (ConfigurationState, SceneState) inherit from Observable
and call _notify() after every committed mutation. Listeners receive the
container itself and read whatever fields they need.

Usage:
    unsubscribe = settings.subscribe(lambda s: renderer.apply_render_configuration(resolve(s)))
    ...
    unsubscribe()
"""

from collections.abc import Callable
from typing import Any

Listener = Callable[[Any], None]
Unsubscribe = Callable[[], None]


class Observable:
    """Mixin holding a listener list with subscribe/unsubscribe semantics.

    Listeners are called synchronously, in subscription order, on the thread
    that committed the mutation (the control thread). A listener that
    unsubscribes during notification does not affect the current round.
    """

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """Register a listener and return a handle that removes it.

        The handle is idempotent: calling it twice is harmless.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
