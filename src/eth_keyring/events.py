"""
Named-event observer registry.

Listeners are plain callables invoked synchronously, in registration order,
with the event payload. A failing listener is logged and skipped.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, List
import logging

logger = logging.getLogger(__name__)

Listener = Callable[..., None]

UNLOCKED = "unlocked"
LOCK = "lock"
VAULT_CREATED = "vaultCreated"
NEW_ACCOUNT = "newAccount"
UPDATE = "update"


class EventEmitter:
    """Minimal publish/subscribe hub keyed by event name."""

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {}

    def on(self, event: str, listener: Listener) -> Callable[[], None]:
        """
        Subscribe to an event.

        Returns:
            Callable that removes this subscription
        """
        self._listeners.setdefault(event, []).append(listener)
        return lambda: self.off(event, listener)

    def once(self, event: str, listener: Listener) -> Callable[[], None]:
        """Subscribe for the next emission only."""
        def wrapper(*args: Any) -> None:
            self.off(event, wrapper)
            listener(*args)

        return self.on(event, wrapper)

    def off(self, event: str, listener: Listener) -> bool:
        """Remove a listener; returns whether it was registered."""
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)
            return True
        return False

    def emit(self, event: str, *args: Any) -> int:
        """
        Call every listener of event with args.

        Returns:
            Number of listeners invoked
        """
        listeners = list(self._listeners.get(event, []))
        for listener in listeners:
            try:
                listener(*args)
            except Exception as e:
                logger.warning(f"Listener for '{event}' raised: {e}")
        return len(listeners)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def remove_all_listeners(self, event: str = None) -> None:
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event, None)


__all__ = [
    "EventEmitter",
    "UNLOCKED",
    "LOCK",
    "VAULT_CREATED",
    "NEW_ACCOUNT",
    "UPDATE",
]
