# slot_reels/domain/machine/entities/reel.py
import logging
import threading
from contextlib import contextmanager
from enum import Enum, auto
from typing import Tuple

from .symbol_table import SymbolTable
from ..errors import StateAccessFailure


DISPLAY_SIZE = 3


class TickOutcome(Enum):
    """Result of a single scheduler step on a reel."""
    ADVANCED = auto()   # position moved by one symbol
    STOPPED = auto()    # pending stop consumed, reel is now at rest
    IDLE = auto()       # reel not spinning, or the caller's generation is stale


class Reel:
    """
    One spinning reel: its symbol strip plus the mutable spin state.

    Position, spinning flag and stop request are shared between the machine
    (start/stop commands), the reel's spin scheduler (position updates) and
    the renderer (reads). Every access is a short critical section on a
    per-reel lock; nothing holds the lock while sleeping.
    """
    def __init__(self, symbols: SymbolTable, reel_id: int = 0, position: int = 0,
                 lock_timeout: float = 1.0):
        """
        Initialize a reel at rest.

        Args:
            symbols: Symbol strip for this reel
            reel_id: Reel index on the machine (0=left, 1=middle, 2=right)
            position: Initial topmost index, wrapped into range
            lock_timeout: Seconds to wait for the state lock before failing
        """
        self.id = reel_id
        self.symbols = symbols
        self.length = len(symbols)
        self.lock_timeout = lock_timeout
        self.logger = logging.getLogger(f"domain.machine.reel.{reel_id}")

        self._lock = threading.Lock()
        self._poisoned = False
        self._position = position % self.length
        self._spinning = False
        self._stop_requested = False
        self._generation = 0

    @contextmanager
    def _guard(self):
        """
        Hold the state lock for one critical section.

        A critical section that raises leaves the reel poisoned: every later
        access fails with StateAccessFailure.
        """
        if not self._lock.acquire(timeout=self.lock_timeout):
            raise StateAccessFailure(self.id, f"state lock not acquired within {self.lock_timeout}s")
        try:
            if self._poisoned:
                raise StateAccessFailure(self.id, "state was left inconsistent by an earlier failure")
            try:
                yield
            except BaseException:
                self._poisoned = True
                self.logger.error(f"Critical section failed, reel {self.id} is now poisoned")
                raise
        finally:
            self._lock.release()

    def start_spinning(self) -> int:
        """
        Mark the reel as spinning and clear any pending stop request.

        Returns:
            The new scheduler generation; only a scheduler holding this
            value may drive the reel from now on.
        """
        with self._guard():
            self._spinning = True
            self._stop_requested = False
            self._generation += 1
            generation = self._generation
        self.logger.debug(f"Reel {self.id} started spinning (generation {generation})")
        return generation

    def request_stop(self):
        """Latch a stop request; the scheduler honors it on its next tick."""
        with self._guard():
            self._stop_requested = True
        self.logger.debug(f"Stop requested for reel {self.id}")

    def is_spinning(self) -> bool:
        with self._guard():
            return self._spinning

    @property
    def position(self) -> int:
        with self._guard():
            return self._position

    @property
    def stop_requested(self) -> bool:
        with self._guard():
            return self._stop_requested

    @property
    def generation(self) -> int:
        with self._guard():
            return self._generation

    def visible_symbols(self) -> Tuple[str, ...]:
        """
        Symbols currently in the window, as (top, middle, bottom).
        """
        with self._guard():
            position = self._position
        return self.symbols.window(position, DISPLAY_SIZE)

    def tick(self, generation: int) -> TickOutcome:
        """
        Run one scheduler step as a single critical section.

        Args:
            generation: Generation the calling scheduler was launched with

        Returns:
            IDLE if the reel is at rest or the generation is stale,
            STOPPED if a pending stop was consumed (position unchanged),
            ADVANCED if the position moved forward by one.
        """
        with self._guard():
            if generation != self._generation or not self._spinning:
                return TickOutcome.IDLE
            if self._stop_requested:
                self._spinning = False
                self._stop_requested = False
                return TickOutcome.STOPPED
            self._position = (self._position + 1) % self.length
            return TickOutcome.ADVANCED

    def __len__(self) -> int:
        return self.length

    def __repr__(self) -> str:
        return f"Reel(id={self.id}, length={self.length})"
