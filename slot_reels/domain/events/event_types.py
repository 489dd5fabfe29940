# slot_reels/domain/events/event_types.py
import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional


@dataclass
class DomainEvent:
    """
    Base class for events raised by the machine and the front-ends.

    Events are created on whichever thread noticed the change (a reel's
    scheduler, the input loop, autoplay); that thread's name is kept.
    """
    type: Enum
    timestamp: Optional[datetime] = None
    data: Optional[Dict[str, Any]] = None
    thread_name: str = field(default="", init=False)

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now()
        # Copy, handlers on other threads may keep the dict
        self.data = dict(self.data or {})
        self.thread_name = threading.current_thread().name

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(type={self.type.name}, thread={self.thread_name})"
