"""
Synchronous event emitter.

Listeners are called in registration order on the emitting thread. The
listener list is copied before delivery, so a listener added or removed
during an emission takes effect from the next one. Events are not stored
for late subscribers.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from device_auth.common.logging import get_logger, log_exception

logger = get_logger(__name__)

Listener = Callable[..., Any]

NEW_TOKEN_AVAILABLE = "newTokenAvailable"
ERROR = "error"


class _OnceWrapper:
    def __init__(self, emitter: "EventEmitter", event: str, listener: Listener):
        self.emitter = emitter
        self.event = event
        self.listener = listener

    def __call__(self, *args: Any) -> Any:
        self.emitter.off(self.event, self)
        return self.listener(*args)


class EventEmitter:
    """Registry of listener callbacks keyed by event name."""

    def __init__(self, *args, **kwargs):
        self._listeners: Dict[str, List[Listener]] = {}
        self._listeners_lock = threading.Lock()
        super().__init__(*args, **kwargs)

    def on(self, event: str, listener: Listener) -> Listener:
        """Register a listener. Returns it, so it can be used as a decorator."""
        with self._listeners_lock:
            self._listeners.setdefault(event, []).append(listener)
        return listener

    def once(self, event: str, listener: Listener) -> Listener:
        """Register a listener that is removed after its first call."""
        self.on(event, _OnceWrapper(self, event, listener))
        return listener

    def off(self, event: str, listener: Listener) -> bool:
        """
        Remove the first registration of a listener.

        Accepts either the listener itself or a listener registered via once().

        Returns:
            True if a registration was removed
        """
        with self._listeners_lock:
            listeners = self._listeners.get(event, [])
            for i, registered in enumerate(listeners):
                if registered is listener or (
                    isinstance(registered, _OnceWrapper)
                    and registered.listener is listener
                ):
                    del listeners[i]
                    if not listeners:
                        del self._listeners[event]
                    return True
        return False

    def remove_all_listeners(self, event: Optional[str] = None) -> None:
        with self._listeners_lock:
            if event is None:
                self._listeners.clear()
            else:
                self._listeners.pop(event, None)

    def listener_count(self, event: str) -> int:
        with self._listeners_lock:
            return len(self._listeners.get(event, []))

    def emit(self, event: str, *args: Any) -> bool:
        """
        Deliver an event to every listener registered right now.

        A listener that raises is logged and does not stop delivery to the
        remaining listeners.

        Returns:
            True if the event had listeners
        """
        with self._listeners_lock:
            listeners = list(self._listeners.get(event, []))

        for listener in listeners:
            try:
                listener(*args)
            except Exception as e:
                log_exception(
                    logger,
                    e,
                    "Event listener raised",
                    level=logging.WARNING,
                    event=event,
                    listener=getattr(listener, "__qualname__", repr(listener)),
                )

        return bool(listeners)
