# slot_reels/application/simulation/autoplay_runner.py
import logging
import time
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from slot_reels.application.analysis.round_stats import RoundStats
from slot_reels.domain.events.event_dispatcher import EventDispatcher
from slot_reels.domain.events.machine_events import MachineEventType, MachineEvent
from slot_reels.domain.machine.entities.slot_machine import SlotMachine


class RoundTimeoutError(RuntimeError):
    """Reels did not come to rest within the round timeout."""
    pass


class AutoplayRunner:
    """
    Plays rounds without a terminal: start all reels, stop them left to
    right after random delays, wait for rest, evaluate the paylines.
    """
    def __init__(self, machine: SlotMachine, rng, config: Optional[Dict[str, Any]] = None,
                 event_dispatcher: Optional[EventDispatcher] = None):
        """
        Args:
            machine: Machine to play on
            rng: RNG strategy used for the stop delays
            config: "autoplay" section of the machine configuration
            event_dispatcher: Optional dispatcher for ROUND_SETTLED events
        """
        self.logger = logging.getLogger(f"application.simulation.autoplay.{machine.id}")
        self.machine = machine
        self.rng = rng
        self.event_dispatcher = event_dispatcher

        self.config = config or {}
        delay_min, delay_max = self.config.get("stop_delay_ms", [150, 600])
        if delay_min > delay_max:
            raise ValueError(f"Invalid stop delay range: [{delay_min}, {delay_max}]")
        self.stop_delay_range: Tuple[float, float] = (delay_min / 1000.0, delay_max / 1000.0)
        self.round_timeout = self.config.get("round_timeout_s", 10)

    def play_round(self) -> Tuple[Tuple[Tuple[str, ...], ...], List[int]]:
        """
        Play one round.

        Returns:
            (snapshot, winning_lines)

        Raises:
            RoundTimeoutError: If the reels keep spinning past the timeout
        """
        self.machine.start_all()

        for index in range(self.machine.REEL_COUNT):
            time.sleep(self.rng.stop_delay(*self.stop_delay_range))
            self.machine.stop(index)

        if not self.machine.wait_until_stopped(timeout=self.round_timeout):
            raise RoundTimeoutError(f"Reels still spinning after {self.round_timeout}s")

        snapshot = self.machine.snapshot()
        winning_lines = self.machine.evaluator.evaluate(snapshot)
        return snapshot, winning_lines

    def run(self, rounds: int) -> RoundStats:
        """
        Play a number of rounds and collect hit statistics.

        Args:
            rounds: Number of rounds to play
        """
        self.logger.info(f"Starting autoplay: {rounds} rounds on machine {self.machine.id}")

        stats = RoundStats(machine_id=self.machine.id, payline_count=len(self.machine.paylines))
        stats.sim_start_time = datetime.now()
        start = time.monotonic()

        for round_number in range(1, rounds + 1):
            snapshot, winning_lines = self.play_round()
            stats.record_round(snapshot, winning_lines, self.machine.paylines)

            self.logger.debug(f"Round {round_number}: {self._format_snapshot(snapshot)} "
                              f"-> lines {[i + 1 for i in winning_lines]}")
            self._dispatch_settled(round_number, snapshot, winning_lines)

        stats.sim_end_time = datetime.now()
        stats.sim_duration = time.monotonic() - start

        self.logger.info(f"Autoplay completed - Rounds: {stats.total_rounds}, "
                         f"Winning rounds: {stats.win_rounds}, Hit rate: {stats.hit_rate:.2%}")
        return stats

    def _format_snapshot(self, snapshot: Sequence[Sequence[str]]) -> str:
        return " | ".join(" ".join(row) for row in zip(*snapshot))

    def _dispatch_settled(self, round_number: int, snapshot, winning_lines: List[int]):
        if self.event_dispatcher:
            self.event_dispatcher.dispatch(MachineEvent(
                type=MachineEventType.ROUND_SETTLED,
                machine_id=self.machine.id,
                data={
                    "round": round_number,
                    "snapshot": [list(symbols) for symbols in snapshot],
                    "winning_lines": list(winning_lines)
                }
            ))
