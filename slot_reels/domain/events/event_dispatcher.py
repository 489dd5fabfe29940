# slot_reels/domain/events/event_dispatcher.py
import logging
import threading
from enum import Enum
from typing import Callable, Dict, List, Type

from .event_types import DomainEvent

Handler = Callable[[DomainEvent], None]


class EventDispatcher:
    """
    Dispatches domain events to registered handlers.

    Scheduler threads dispatch too, so registrations are guarded by a lock
    and handlers run on the dispatching thread, outside the lock. A handler
    that raises is logged and skipped.
    """
    def __init__(self):
        self.logger = logging.getLogger("domain.events.dispatcher")
        self.handlers: Dict[Enum, List[Handler]] = {}
        self.class_handlers: Dict[type, List[Handler]] = {}
        self._lock = threading.Lock()

    def register(self, event_type: Enum, handler: Handler):
        """Call handler for every event of the given type."""
        with self._lock:
            self.handlers.setdefault(event_type, []).append(handler)
        self.logger.debug(f"Registered handler for event type: {event_type.name}")

    def register_for_class(self, event_class: Type[DomainEvent], handler: Handler):
        """Call handler for every event that is an instance of event_class."""
        with self._lock:
            self.class_handlers.setdefault(event_class, []).append(handler)
        self.logger.debug(f"Registered handler for event class: {event_class.__name__}")

    def unregister(self, event_type: Enum, handler: Handler) -> bool:
        """
        Returns:
            True if handler was removed, False if it was not registered
        """
        with self._lock:
            handlers = self.handlers.get(event_type, [])
            if handler not in handlers:
                return False
            handlers.remove(handler)
        self.logger.debug(f"Unregistered handler for event type: {event_type.name}")
        return True

    def dispatch(self, event: DomainEvent):
        with self._lock:
            targets = list(self.handlers.get(event.type, []))
            for cls in type(event).__mro__:
                targets += self.class_handlers.get(cls, [])

        if not targets:
            return

        for handler in targets:
            try:
                handler(event)
            except Exception as e:
                self.logger.error(f"Error in handler for {event}: {str(e)}")
