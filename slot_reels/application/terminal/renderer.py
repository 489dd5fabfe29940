# slot_reels/application/terminal/renderer.py
import curses
import logging
from typing import List, Sequence

from slot_reels.domain.machine.entities.slot_machine import SlotMachine

TITLE = "🎰 Slot Machine 🎰"

BOX_TOP = "┌────┬────┬────┐"
BOX_SEPARATOR = "├────┼────┼────┤"
BOX_BOTTOM = "└────┴────┴────┘"

HELP_LINES = [
    "Controls:",
    "Space: spin all reels",
    "Left:  stop left reel",
    "Down:  stop middle reel",
    "Right: stop right reel",
    "Esc/q: quit",
]

REELS_TOP = 2
STATUS_TOP = 10
RESULT_TOP = 14

WIN_PAIR = 1
STATUS_PAIR = 2


def reel_rows(snapshot: Sequence[Sequence[str]]) -> List[str]:
    """Box-drawn 3x3 grid for a [reel][row] snapshot."""
    lines = [BOX_TOP]
    for row in range(3):
        if row:
            lines.append(BOX_SEPARATOR)
        lines.append("│ " + " │ ".join(symbols[row] for symbols in snapshot) + " │")
    lines.append(BOX_BOTTOM)
    return lines


def status_lines(spinning: Sequence[bool]) -> List[str]:
    return [f"Reel {i + 1}: {'spinning' if is_spinning else 'stopped'}"
            for i, is_spinning in enumerate(spinning)]


def result_lines(winning_lines: Sequence[int], payline_descriptions: Sequence[str]) -> List[str]:
    """
    Text shown once every reel is at rest.

    Args:
        winning_lines: Indices returned by check_winnings
        payline_descriptions: One description per payline, in table order
    """
    if not winning_lines:
        return ["No win this time"]

    lines = ["🎉 WIN! 🎉",
             "Winning lines: " + " ".join(str(i + 1) for i in winning_lines),
             "",
             "Paylines:"]
    for i, description in enumerate(payline_descriptions):
        marker = "🎯" if i in winning_lines else "  "
        lines.append(f"{marker} {description}")
    return lines


class ReelRenderer:
    """
    Draws the machine on a curses window at fixed positions.
    """
    def __init__(self, machine: SlotMachine, colors: bool = True):
        self.machine = machine
        self.colors = colors
        self.logger = logging.getLogger("application.terminal.renderer")
        self._descriptions = [machine.evaluator.describe(i) for i in range(len(machine.paylines))]
        self.help_top = RESULT_TOP + len(self._descriptions) + 6

    def init_colors(self):
        if not self.colors or not curses.has_colors():
            self.colors = False
            return
        curses.start_color()
        curses.use_default_colors()
        curses.init_pair(WIN_PAIR, curses.COLOR_YELLOW, -1)
        curses.init_pair(STATUS_PAIR, curses.COLOR_CYAN, -1)

    def draw_initial_screen(self, stdscr):
        stdscr.clear()
        self._put(stdscr, 0, TITLE, curses.A_BOLD)
        for offset, line in enumerate(HELP_LINES):
            self._put(stdscr, self.help_top + offset, line)
        self.draw(stdscr)

    def draw(self, stdscr):
        """Redraw reels, statuses and, when all reels rest, the result."""
        # Spin flags first: reels at rest before the snapshot cannot move during it
        spinning = self.machine.spinning_state()
        snapshot = self.machine.snapshot()

        for offset, line in enumerate(reel_rows(snapshot)):
            self._put(stdscr, REELS_TOP + offset, line)

        status_attr = curses.color_pair(STATUS_PAIR) if self.colors else curses.A_NORMAL
        for offset, line in enumerate(status_lines(spinning)):
            self._put(stdscr, STATUS_TOP + offset, line, status_attr)

        result = []
        attr = curses.A_NORMAL
        if not any(spinning):
            winning_lines = self.machine.evaluator.evaluate(snapshot)
            win_attr = curses.color_pair(WIN_PAIR) | curses.A_BOLD if self.colors else curses.A_BOLD
            attr = win_attr if winning_lines else curses.A_NORMAL
            result = result_lines(winning_lines, self._descriptions)

        for y in range(RESULT_TOP, self.help_top):
            offset = y - RESULT_TOP
            self._put(stdscr, y, result[offset] if offset < len(result) else "", attr)

        stdscr.refresh()

    def _put(self, stdscr, y: int, text: str, attr: int = curses.A_NORMAL):
        try:
            stdscr.move(y, 0)
            stdscr.clrtoeol()
            stdscr.addstr(y, 0, text, attr)
        except curses.error:
            # Terminal too small for this line
            self.logger.debug(f"Could not draw line {y}: terminal too small")
