# slot_reels/domain/events/machine_events.py
from enum import Enum, auto
from dataclasses import dataclass
from typing import Optional

from .event_types import DomainEvent


class MachineEventType(Enum):
    """Event types raised by the reel machine."""
    SPIN_STARTED = auto()       # start_all launched the schedulers
    STOP_REQUESTED = auto()     # a stop was latched on one reel
    REEL_STOPPED = auto()       # a scheduler consumed the stop and exited
    SCHEDULER_FAILED = auto()   # a scheduler terminated with an error
    ROUND_SETTLED = auto()      # all reels at rest and paylines evaluated


@dataclass
class MachineEvent(DomainEvent):
    """Event describing something that happened on a machine."""
    machine_id: str = ""
    reel_id: Optional[int] = None

    def __post_init__(self):
        """Initialize base class and mirror the ids into the data dict."""
        super().__post_init__()

        self.data["machine_id"] = self.machine_id
        if self.reel_id is not None:
            self.data["reel_id"] = self.reel_id
