# slot_reels/domain/machine/services/spin_scheduler.py
import logging
import time
from typing import Optional

from slot_reels.domain.events.event_dispatcher import EventDispatcher
from slot_reels.domain.events.machine_events import MachineEventType, MachineEvent
from ..entities.reel import Reel, TickOutcome


class SpinScheduler:
    """
    Drives one reel while it spins.

    Each tick either advances the reel by one symbol, consumes a pending
    stop, or finds the reel at rest (or driven by a newer scheduler) and
    exits. The loop ends only on its own; stopping is signalled through the
    reel's flags.
    """
    def __init__(self, reel: Reel, generation: int, tick_interval: float,
                 machine_id: str = "", event_dispatcher: Optional[EventDispatcher] = None):
        """
        Args:
            reel: Reel to drive
            generation: Generation returned by reel.start_spinning()
            tick_interval: Seconds between position advances
            machine_id: Owning machine, for events
            event_dispatcher: Optional dispatcher for REEL_STOPPED events
        """
        self.reel = reel
        self.generation = generation
        self.tick_interval = tick_interval
        self.machine_id = machine_id
        self.event_dispatcher = event_dispatcher
        self.advances = 0
        self.outcome = None
        self.logger = logging.getLogger(f"domain.machine.scheduler.{reel.id}")

    def run(self) -> int:
        """
        Spin until the reel stops or this scheduler goes stale.

        StateAccessFailure from the reel propagates and ends the scheduler.

        Returns:
            Number of positions advanced
        """
        self.logger.debug(f"Scheduler for reel {self.reel.id} running (generation {self.generation})")

        while True:
            outcome = self.reel.tick(self.generation)
            if outcome is not TickOutcome.ADVANCED:
                break
            self.advances += 1
            time.sleep(self.tick_interval)

        self.outcome = outcome
        if outcome is TickOutcome.STOPPED:
            self.logger.debug(f"Reel {self.reel.id} stopped after {self.advances} advances")
            self._dispatch_stopped()
        else:
            self.logger.debug(f"Scheduler for reel {self.reel.id} exiting idle (generation {self.generation})")

        return self.advances

    def _dispatch_stopped(self):
        if not self.event_dispatcher:
            return
        self.event_dispatcher.dispatch(MachineEvent(
            type=MachineEventType.REEL_STOPPED,
            machine_id=self.machine_id,
            reel_id=self.reel.id,
            data={"position": self.reel.position, "advances": self.advances}
        ))

    def __repr__(self) -> str:
        return f"SpinScheduler(reel={self.reel.id}, generation={self.generation})"
