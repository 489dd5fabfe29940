# tests/test_slot_machine.py
import unittest
import sys
import os
import time

# Add repo root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from slot_reels.domain.events.event_dispatcher import EventDispatcher
from slot_reels.domain.events.machine_events import MachineEventType
from slot_reels.domain.machine.entities.reel import Reel, TickOutcome
from slot_reels.domain.machine.entities.slot_machine import SlotMachine
from slot_reels.domain.machine.entities.symbol_table import SymbolTable
from slot_reels.domain.machine.errors import InvalidReelIndexError, StateAccessFailure
from slot_reels.domain.machine.services.spin_scheduler import SpinScheduler
from slot_reels.domain.machine.services.win_evaluation import WinEvaluator, STANDARD_PAYLINES


TICK = 0.02


def build_machine(positions=(0, 0, 0), tick_interval=TICK, event_dispatcher=None):
    table = SymbolTable(["A", "B", "C", "D", "E"], "abcde")
    reels = [Reel(table, i, position=p) for i, p in enumerate(positions)]
    return SlotMachine("test_machine", reels, WinEvaluator(STANDARD_PAYLINES),
                       tick_interval=tick_interval, event_dispatcher=event_dispatcher)


def wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


class TestSpinScheduler(unittest.TestCase):
    """Test cases for the per-reel spin scheduler."""

    def setUp(self):
        """Set up test fixtures."""
        self.table = SymbolTable(["A", "B", "C", "D", "E"])
        self.reel = Reel(self.table, reel_id=0, position=2)

    def test_stop_before_first_tick(self):
        """A stop requested before the first tick leaves the position unchanged."""
        generation = self.reel.start_spinning()
        self.reel.request_stop()

        scheduler = SpinScheduler(self.reel, generation, TICK)
        advances = scheduler.run()

        self.assertEqual(advances, 0)
        self.assertIs(scheduler.outcome, TickOutcome.STOPPED)
        self.assertEqual(self.reel.position, 2)
        self.assertFalse(self.reel.is_spinning())

    def test_stale_scheduler_exits_without_advancing(self):
        """A scheduler for an old generation exits idle at once."""
        old_generation = self.reel.start_spinning()
        self.reel.start_spinning()

        scheduler = SpinScheduler(self.reel, old_generation, TICK)

        self.assertEqual(scheduler.run(), 0)
        self.assertIs(scheduler.outcome, TickOutcome.IDLE)
        self.assertEqual(self.reel.position, 2)
        self.assertTrue(self.reel.is_spinning())

    def test_reel_stopped_event(self):
        """A consumed stop is reported with the final position."""
        dispatcher = EventDispatcher()
        events = []
        dispatcher.register(MachineEventType.REEL_STOPPED, events.append)

        generation = self.reel.start_spinning()
        self.reel.request_stop()
        SpinScheduler(self.reel, generation, TICK, "m1", dispatcher).run()

        self.assertEqual(len(events), 1)
        self.assertEqual(events[0].reel_id, 0)
        self.assertEqual(events[0].data["position"], 2)
        self.assertEqual(events[0].data["machine_id"], "m1")

    def test_failure_propagates(self):
        """StateAccessFailure from the reel ends the scheduler."""
        generation = self.reel.start_spinning()
        with self.assertRaises(RuntimeError):
            with self.reel._guard():
                raise RuntimeError("corrupt")

        with self.assertRaises(StateAccessFailure):
            SpinScheduler(self.reel, generation, TICK).run()


class TestSlotMachine(unittest.TestCase):
    """Test cases for the three-reel coordinator."""

    def setUp(self):
        """Set up test fixtures."""
        self.dispatcher = EventDispatcher()
        self.machine = build_machine(event_dispatcher=self.dispatcher)

    def tearDown(self):
        self.machine.shutdown(wait=True)

    def test_construction(self):
        """A new machine is at rest with the configured paylines."""
        self.assertEqual(len(self.machine.reels), 3)
        self.assertEqual(self.machine.paylines, STANDARD_PAYLINES)
        self.assertFalse(self.machine.any_spinning())
        self.assertEqual(self.machine.spinning_state(), (False, False, False))

    def test_wrong_reel_count(self):
        """Machines need exactly three reels."""
        table = SymbolTable(["A", "B", "C"])
        with self.assertRaises(ValueError):
            SlotMachine("bad", [Reel(table, 0), Reel(table, 1)], WinEvaluator(STANDARD_PAYLINES))

    def test_non_positive_tick(self):
        """Tick interval must be positive."""
        with self.assertRaises(ValueError):
            build_machine(tick_interval=0)

    def test_start_all_spins_every_reel(self):
        """After start_all every reel spins and positions move."""
        self.machine.start_all()

        self.assertTrue(all(self.machine.spinning_state()))
        self.assertTrue(wait_for(lambda: self.machine.reels[0].position != 0))

    def test_stop_each_reel(self):
        """Stopping every reel brings the machine to rest."""
        self.machine.start_all()
        time.sleep(TICK * 3)

        for index in range(3):
            self.machine.stop(index)

        self.assertTrue(self.machine.wait_until_stopped(timeout=2.0))
        self.assertFalse(self.machine.any_spinning())

        # At rest: positions stay put
        positions = [reel.position for reel in self.machine.reels]
        time.sleep(TICK * 5)
        self.assertEqual([reel.position for reel in self.machine.reels], positions)

    def test_stop_takes_effect_within_one_tick(self):
        """A stopped reel rests after at most one more tick, at most one step further."""
        tick = 0.05
        machine = build_machine(tick_interval=tick)
        self.addCleanup(machine.shutdown)

        machine.start_all()
        time.sleep(tick * 1.5)

        for index, reel in enumerate(machine.reels):
            before = reel.position
            machine.stop(index)
            time.sleep(tick * 2)

            self.assertFalse(reel.is_spinning(), f"reel {index} still spinning")
            self.assertIn(reel.position, (before, (before + 1) % len(reel)))

    def test_stop_one_reel_leaves_others_spinning(self):
        """Reels stop independently."""
        self.machine.start_all()
        self.machine.stop(1)

        self.assertTrue(wait_for(lambda: not self.machine.reels[1].is_spinning()))
        self.assertTrue(self.machine.reels[0].is_spinning())
        self.assertTrue(self.machine.reels[2].is_spinning())

    def test_stop_invalid_index(self):
        """Out of range indices are rejected without touching any reel."""
        self.machine.start_all()

        for index in (3, -1, 10, True, "1"):
            with self.assertRaises(InvalidReelIndexError):
                self.machine.stop(index)

        for reel in self.machine.reels:
            self.assertFalse(reel.stop_requested)

    def test_invalid_index_is_value_error(self):
        """InvalidReelIndexError can be handled as a ValueError."""
        with self.assertRaises(ValueError):
            self.machine.stop(3)

    def test_stop_while_idle_is_harmless(self):
        """A stop on a reel at rest does not affect the next spin."""
        self.machine.stop(0)
        self.machine.start_all()

        time.sleep(TICK * 3)
        self.assertTrue(self.machine.reels[0].is_spinning())

    def test_has_state_changed(self):
        """State change detection compares against the previous call."""
        self.assertFalse(self.machine.has_state_changed())

        self.machine.start_all()
        self.assertTrue(self.machine.has_state_changed())
        self.assertFalse(self.machine.has_state_changed())

        self.machine.stop(0)
        self.assertTrue(wait_for(lambda: not self.machine.reels[0].is_spinning()))
        self.assertTrue(self.machine.has_state_changed())
        self.assertFalse(self.machine.has_state_changed())

    def test_restart_does_not_double_speed(self):
        """Restarting while spinning leaves one active scheduler per reel."""
        for _ in range(5):
            self.machine.start_all()

        self.assertEqual([reel.generation for reel in self.machine.reels], [5, 5, 5])

        for index in range(3):
            self.machine.stop(index)
        self.assertTrue(self.machine.wait_until_stopped(timeout=2.0))

        positions = [reel.position for reel in self.machine.reels]
        time.sleep(TICK * 5)
        self.assertEqual([reel.position for reel in self.machine.reels], positions)
        self.assertEqual(self.machine.scheduler_errors(), {})

    def test_snapshot_and_winnings(self):
        """A machine at rest reports the visible symbols and winning lines."""
        self.assertEqual(self.machine.snapshot(), (("A", "B", "C"),) * 3)
        self.assertEqual(self.machine.check_winnings(), [0, 1, 2])

        offset = build_machine(positions=(0, 1, 0))
        try:
            self.assertEqual(offset.check_winnings(), [])
        finally:
            offset.shutdown()

    def test_events(self):
        """Start, stop and reel-stopped events are dispatched."""
        events = []
        self.dispatcher.register(MachineEventType.SPIN_STARTED, events.append)
        self.dispatcher.register(MachineEventType.STOP_REQUESTED, events.append)
        self.dispatcher.register(MachineEventType.REEL_STOPPED, events.append)

        self.machine.start_all()
        self.machine.stop(2)
        self.assertTrue(wait_for(lambda: len(events) >= 3))

        self.assertEqual(events[0].type, MachineEventType.SPIN_STARTED)
        # The scheduler thread may report the stop before the request event lands
        self.assertEqual({e.type for e in events[1:]},
                         {MachineEventType.STOP_REQUESTED, MachineEventType.REEL_STOPPED})
        self.assertEqual({e.reel_id for e in events[1:]}, {2})

    def test_scheduler_failure_recorded(self):
        """A scheduler that dies on a poisoned reel is reported, not silent."""
        failures = []
        self.dispatcher.register(MachineEventType.SCHEDULER_FAILED, failures.append)

        self.machine.start_all()
        with self.assertRaises(RuntimeError):
            with self.machine.reels[0]._guard():
                raise RuntimeError("corrupt")

        self.assertTrue(wait_for(lambda: 0 in self.machine.scheduler_errors()))
        self.assertIsInstance(self.machine.scheduler_errors()[0], StateAccessFailure)
        self.assertTrue(wait_for(lambda: len(failures) == 1))
        self.assertEqual(failures[0].reel_id, 0)

        # The other reels keep working
        self.machine.stop(1)
        self.machine.stop(2)
        self.assertTrue(wait_for(lambda: not self.machine.reels[1].is_spinning()
                                 and not self.machine.reels[2].is_spinning()))

        with self.assertRaises(StateAccessFailure):
            self.machine.any_spinning()

    def test_context_manager(self):
        """Leaving the context stops the reels and the pool."""
        with build_machine() as machine:
            machine.start_all()
        self.assertTrue(machine.pool.is_shutdown)
        self.assertFalse(machine.any_spinning())

    def test_string_representation(self):
        """Test string representation."""
        self.assertEqual(repr(self.machine), "SlotMachine(id=test_machine, reels=3, paylines=5)")


if __name__ == "__main__":
    unittest.main()
