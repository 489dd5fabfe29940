# slot_reels/domain/machine/entities/slot_machine.py
import logging
import threading
import time
from concurrent.futures import Future
from functools import partial
from typing import Dict, List, Optional, Sequence, Tuple

from slot_reels.domain.events.event_dispatcher import EventDispatcher
from slot_reels.domain.events.machine_events import MachineEventType, MachineEvent
from slot_reels.infrastructure.concurrency.thread_pool import ThreadPool
from .reel import Reel
from ..errors import InvalidReelIndexError, StateAccessFailure
from ..services.spin_scheduler import SpinScheduler
from ..services.win_evaluation import WinEvaluator


class SlotMachine:
    """
    Three-reel machine coordinating the reels and their spin schedulers.

    Input handlers call start_all() and stop(); a renderer polls
    any_spinning(), has_state_changed() and the reels' visible symbols.
    """
    REEL_COUNT = 3

    def __init__(self, machine_id: str, reels: Sequence[Reel], evaluator: WinEvaluator,
                 tick_interval: float = 0.1,
                 event_dispatcher: Optional[EventDispatcher] = None,
                 thread_pool: Optional[ThreadPool] = None):
        """
        Initialize the slot machine.

        Args:
            machine_id: Unique identifier for this machine
            reels: Exactly three reels, left to right
            evaluator: Win evaluator holding the payline table
            tick_interval: Seconds between reel advances while spinning
            event_dispatcher: Optional dispatcher for machine events
            thread_pool: Pool the schedulers run on (created if omitted)
        """
        if len(reels) != self.REEL_COUNT:
            raise ValueError(f"A machine needs exactly {self.REEL_COUNT} reels, got {len(reels)}")
        if tick_interval <= 0:
            raise ValueError(f"Tick interval must be positive, got {tick_interval}")

        self.id = machine_id
        self.logger = logging.getLogger(f"domain.machine.{machine_id}")
        self.reels: Tuple[Reel, ...] = tuple(reels)
        self.evaluator = evaluator
        self.tick_interval = tick_interval
        self.event_dispatcher = event_dispatcher

        # Stale schedulers exit within a tick, so a restart needs at most
        # one extra worker per reel.
        self.pool = thread_pool or ThreadPool(max_workers=2 * self.REEL_COUNT,
                                              thread_name_prefix=f"reel-{machine_id}")

        self._last_spinning_state = (False,) * self.REEL_COUNT
        self._errors: Dict[int, BaseException] = {}
        self._errors_lock = threading.Lock()

        self.logger.info(f"Slot machine {machine_id} ready: reel lengths "
                         f"{[len(reel) for reel in self.reels]}, {len(evaluator)} paylines, "
                         f"tick {tick_interval * 1000:.0f} ms")

    @property
    def paylines(self):
        return self.evaluator.paylines

    def start_all(self):
        """
        Start every reel and launch a fresh scheduler for each.
        Never blocks on schedulers from a previous spin.
        """
        generations = [reel.start_spinning() for reel in self.reels]

        for reel, generation in zip(self.reels, generations):
            scheduler = SpinScheduler(reel, generation, self.tick_interval,
                                      machine_id=self.id,
                                      event_dispatcher=self.event_dispatcher)
            future = self.pool.submit(scheduler.run)
            future.add_done_callback(partial(self._on_scheduler_done, reel.id))

        self.logger.debug(f"All reels started (generations {generations})")
        self._dispatch(MachineEventType.SPIN_STARTED, data={"generations": generations})

    def stop(self, index: int):
        """
        Request a stop on one reel.

        Raises:
            InvalidReelIndexError: If index is not 0, 1 or 2
        """
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < self.REEL_COUNT:
            self.logger.warning(f"Ignoring stop for invalid reel index {index!r}")
            raise InvalidReelIndexError(index, self.REEL_COUNT)

        self.reels[index].request_stop()
        self._dispatch(MachineEventType.STOP_REQUESTED, reel_id=index)

    def spinning_state(self) -> Tuple[bool, ...]:
        return tuple(reel.is_spinning() for reel in self.reels)

    def has_state_changed(self) -> bool:
        """
        Compare the reels' spin flags with the last call and remember them.
        Only meant for the rendering path.
        """
        current_state = self.spinning_state()
        changed = current_state != self._last_spinning_state
        self._last_spinning_state = current_state
        return changed

    def any_spinning(self) -> bool:
        return any(reel.is_spinning() for reel in self.reels)

    def snapshot(self) -> Tuple[Tuple[str, ...], ...]:
        """Visible symbols of every reel, indexed [reel][row]."""
        return tuple(reel.visible_symbols() for reel in self.reels)

    def check_winnings(self) -> List[int]:
        return self.evaluator.evaluate(self.snapshot())

    def wait_until_stopped(self, timeout: Optional[float] = None,
                           poll_interval: Optional[float] = None) -> bool:
        """
        Poll until no reel spins.

        Args:
            timeout: Maximum seconds to wait, None for no limit
            poll_interval: Seconds between polls (default: half a tick)

        Returns:
            True if every reel came to rest in time
        """
        poll_interval = poll_interval or self.tick_interval / 2
        deadline = None if timeout is None else time.monotonic() + timeout
        while self.any_spinning():
            if deadline is not None and time.monotonic() >= deadline:
                return False
            time.sleep(poll_interval)
        return True

    def scheduler_errors(self) -> Dict[int, BaseException]:
        """Errors that terminated schedulers, keyed by reel id."""
        with self._errors_lock:
            return dict(self._errors)

    def shutdown(self, wait: bool = True):
        """Ask every reel to stop and release the scheduler threads."""
        self.logger.info(f"Shutting down slot machine {self.id}")
        for reel in self.reels:
            try:
                reel.request_stop()
            except StateAccessFailure as e:
                # The failed reel's scheduler has already exited.
                self.logger.error(f"Could not stop reel {reel.id} during shutdown: {e}")
        self.pool.shutdown(wait=wait)

    def _on_scheduler_done(self, reel_id: int, future: Future):
        if future.cancelled():
            return
        error = future.exception()
        if error is None:
            return

        self.logger.error(f"Spin scheduler for reel {reel_id} failed: {error}")
        with self._errors_lock:
            self._errors[reel_id] = error
        self._dispatch(MachineEventType.SCHEDULER_FAILED, reel_id=reel_id, data={"error": str(error)})

    def _dispatch(self, event_type: MachineEventType, reel_id: Optional[int] = None, data=None):
        if self.event_dispatcher:
            self.event_dispatcher.dispatch(MachineEvent(
                type=event_type,
                machine_id=self.id,
                reel_id=reel_id,
                data=data
            ))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.shutdown(wait=True)
        return False

    def __repr__(self) -> str:
        return f"SlotMachine(id={self.id}, reels={len(self.reels)}, paylines={len(self.evaluator)})"
