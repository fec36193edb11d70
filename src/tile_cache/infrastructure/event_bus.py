import logging
from collections import defaultdict
from typing import Any, Callable, DefaultDict, List

logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]


class EventBus:
    """Fire-and-forget notifications to the listeners registered at emit time.

    Listeners are called synchronously in registration order. Nothing is
    buffered: an event emitted while nobody listens is lost.
    """

    def __init__(self):
        self._listeners: DefaultDict[str, List[Listener]] = defaultdict(list)

    def subscribe(self, event: str, listener: Listener) -> Callable[[], None]:
        """Register a listener, returns a callable that removes it again"""
        self._listeners[event].append(listener)

        def unsubscribe() -> None:
            self.unsubscribe(event, listener)

        return unsubscribe

    def unsubscribe(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def emit(self, event: str, payload: Any = None) -> None:
        """Deliver payload to the current listeners of event"""
        # Copy so listeners may unsubscribe while being called
        for listener in list(self._listeners.get(event, ())):
            try:
                listener(payload)
            except Exception:
                logger.exception("Listener for %r event failed", event)
