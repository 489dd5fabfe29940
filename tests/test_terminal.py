# tests/test_terminal.py
import unittest
import sys
import os
import curses

# Add repo root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from slot_reels.application.terminal.game_loop import TerminalGame
from slot_reels.application.terminal.key_mapping import CommandType, ReelCommand, map_key
from slot_reels.application.terminal.renderer import (
    ReelRenderer, reel_rows, status_lines, result_lines, RESULT_TOP, STATUS_TOP, REELS_TOP
)
from slot_reels.domain.machine.entities.reel import Reel
from slot_reels.domain.machine.entities.slot_machine import SlotMachine
from slot_reels.domain.machine.entities.symbol_table import SymbolTable
from slot_reels.domain.machine.services.win_evaluation import WinEvaluator, STANDARD_PAYLINES


def build_machine(positions=(0, 0, 0)):
    table = SymbolTable(["A", "B", "C", "D", "E"])
    reels = [Reel(table, i, position=p) for i, p in enumerate(positions)]
    return SlotMachine("terminal_test", reels, WinEvaluator(STANDARD_PAYLINES), tick_interval=0.01)


class FakeScreen:
    """Records what would be drawn on a curses window."""

    def __init__(self, keys=()):
        self.lines = {}
        self.keys = list(keys)
        self.refreshed = 0

    def move(self, y, x):
        pass

    def clrtoeol(self):
        pass

    def addstr(self, y, x, text, attr=0):
        self.lines[y] = text

    def refresh(self):
        self.refreshed += 1

    def getch(self):
        return self.keys.pop(0) if self.keys else -1

    def clear(self):
        self.lines.clear()


class TestKeyMapping(unittest.TestCase):
    """Test cases for key to command mapping."""

    def test_space_starts_all(self):
        self.assertEqual(map_key(ord(' ')), ReelCommand(CommandType.START_ALL))
        self.assertEqual(map_key(0x3000), ReelCommand(CommandType.START_ALL))

    def test_enter_and_tab_ignored(self):
        """Control whitespace does not start the reels."""
        for key in (ord('\n'), ord('\r'), ord('\t'), curses.KEY_ENTER):
            self.assertIsNone(map_key(key))

    def test_arrows_stop_reels(self):
        self.assertEqual(map_key(curses.KEY_LEFT), ReelCommand(CommandType.STOP, 0))
        self.assertEqual(map_key(curses.KEY_DOWN), ReelCommand(CommandType.STOP, 1))
        self.assertEqual(map_key(curses.KEY_RIGHT), ReelCommand(CommandType.STOP, 2))

    def test_exit_keys(self):
        for key in (27, ord('q'), ord('Q')):
            self.assertEqual(map_key(key).type, CommandType.EXIT)

    def test_other_keys_ignored(self):
        self.assertIsNone(map_key(-1))
        self.assertIsNone(map_key(ord('x')))
        self.assertIsNone(map_key(curses.KEY_UP))


class TestRendererText(unittest.TestCase):
    """Test cases for the text the renderer draws."""

    def test_reel_rows(self):
        snapshot = (("A", "B", "C"), ("D", "E", "A"), ("B", "C", "D"))
        rows = reel_rows(snapshot)

        self.assertEqual(len(rows), 7)
        self.assertEqual(rows[1], "│ A │ D │ B │")
        self.assertEqual(rows[3], "│ B │ E │ C │")
        self.assertEqual(rows[5], "│ C │ A │ D │")

    def test_status_lines(self):
        self.assertEqual(status_lines([True, False, True]),
                         ["Reel 1: spinning", "Reel 2: stopped", "Reel 3: spinning"])

    def test_no_win(self):
        self.assertEqual(result_lines([], ["Line 1: [1, 1, 1]"]), ["No win this time"])

    def test_win_marks_lines(self):
        descriptions = ["Line 1: [1, 1, 1]", "Line 2: [2, 2, 2]"]
        lines = result_lines([1], descriptions)

        self.assertEqual(lines[0], "🎉 WIN! 🎉")
        self.assertEqual(lines[1], "Winning lines: 2")
        self.assertEqual(lines[-2], "   Line 1: [1, 1, 1]")
        self.assertEqual(lines[-1], "🎯 Line 2: [2, 2, 2]")


class TestReelRenderer(unittest.TestCase):
    """Test drawing against a recording screen."""

    def setUp(self):
        self.machine = build_machine()
        self.renderer = ReelRenderer(self.machine, colors=False)
        self.screen = FakeScreen()

    def tearDown(self):
        self.machine.shutdown()

    def test_draw_at_rest_shows_result(self):
        self.renderer.draw(self.screen)

        self.assertEqual(self.screen.lines[REELS_TOP + 1], "│ A │ A │ A │")
        self.assertEqual(self.screen.lines[STATUS_TOP], "Reel 1: stopped")
        self.assertEqual(self.screen.lines[RESULT_TOP], "🎉 WIN! 🎉")
        self.assertEqual(self.screen.lines[RESULT_TOP + 1], "Winning lines: 1 2 3")
        self.assertEqual(self.screen.refreshed, 1)

    def test_draw_while_spinning_hides_result(self):
        self.machine.reels[0].start_spinning()
        self.renderer.draw(self.screen)

        self.assertEqual(self.screen.lines[STATUS_TOP], "Reel 1: spinning")
        self.assertEqual(self.screen.lines[RESULT_TOP], "")

    def test_initial_screen_has_help(self):
        self.renderer.draw_initial_screen(self.screen)

        self.assertIn("Slot Machine", self.screen.lines[0])
        self.assertEqual(self.screen.lines[self.renderer.help_top], "Controls:")
        self.assertEqual(self.screen.lines[RESULT_TOP], "🎉 WIN! 🎉")

    def test_help_below_results(self):
        self.assertEqual(self.renderer.help_top, RESULT_TOP + 5 + 6)


class TestTerminalGame(unittest.TestCase):
    """Test the input and frame handling without a terminal."""

    def setUp(self):
        self.machine = build_machine()
        self.game = TerminalGame(self.machine, render_interval=0.01,
                                 renderer=ReelRenderer(self.machine, colors=False))

    def tearDown(self):
        self.machine.shutdown()

    def test_commands(self):
        self.assertTrue(self.game.handle_command(None))
        self.assertTrue(self.game.handle_command(ReelCommand(CommandType.START_ALL)))
        self.assertTrue(self.machine.any_spinning())

        self.assertTrue(self.game.handle_command(ReelCommand(CommandType.STOP, 1)))
        self.assertTrue(self.machine.reels[1].stop_requested or not self.machine.reels[1].is_spinning())

        self.assertFalse(self.game.handle_command(ReelCommand(CommandType.EXIT)))

    def test_invalid_stop_is_logged(self):
        with self.assertLogs("application.terminal.game", level="WARNING"):
            self.assertTrue(self.game.handle_command(ReelCommand(CommandType.STOP, 5)))

    def test_poll_input_drains_keys(self):
        screen = FakeScreen(keys=[ord(' '), ord('x'), curses.KEY_LEFT])

        self.assertTrue(self.game.poll_input(screen))
        self.assertEqual(screen.keys, [])
        self.assertTrue(self.machine.reels[1].is_spinning())

    def test_poll_input_exit(self):
        screen = FakeScreen(keys=[27, ord(' ')])

        self.assertFalse(self.game.poll_input(screen))
        self.assertFalse(self.machine.any_spinning())

    def test_render_frame_only_when_needed(self):
        screen = FakeScreen()

        self.game.render_frame(screen)
        self.assertEqual(screen.refreshed, 0)

        self.machine.start_all()
        self.game.render_frame(screen)
        self.assertEqual(screen.refreshed, 1)


if __name__ == "__main__":
    unittest.main()
