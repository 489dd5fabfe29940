# slot_reels/application/terminal/game_loop.py
import curses
import locale
import logging
import os
import time
from typing import Optional

from slot_reels.domain.machine.entities.slot_machine import SlotMachine
from slot_reels.domain.machine.errors import InvalidReelIndexError
from .key_mapping import CommandType, ReelCommand, map_key
from .renderer import ReelRenderer


class TerminalGame:
    """
    Interactive curses front-end.

    One loop reads keys without blocking, forwards them to the machine and
    redraws every render interval while a reel spins or the spin state
    changed. The reels themselves advance on their own scheduler threads.
    """
    def __init__(self, machine: SlotMachine, render_interval: float = 0.035,
                 renderer: Optional[ReelRenderer] = None):
        self.machine = machine
        self.render_interval = render_interval
        self.renderer = renderer or ReelRenderer(machine)
        self.logger = logging.getLogger("application.terminal.game")
        self.running = False

    def run(self):
        """Take over the terminal until the player quits."""
        # Needed for curses to draw the emoji symbols
        locale.setlocale(locale.LC_ALL, "")
        # Report a bare Esc press quickly instead of waiting for an escape sequence
        os.environ.setdefault("ESCDELAY", "25")
        self.logger.info("Starting terminal game")
        curses.wrapper(self._main)
        self.logger.info("Terminal game finished")

    def handle_command(self, command: Optional[ReelCommand]) -> bool:
        """
        Apply one command to the machine.

        Returns:
            False once the player asked to quit
        """
        if command is None:
            return True

        if command.type is CommandType.EXIT:
            self.logger.info("Exit requested")
            return False

        if command.type is CommandType.START_ALL:
            self.machine.start_all()
        elif command.type is CommandType.STOP:
            try:
                self.machine.stop(command.index)
            except InvalidReelIndexError as e:
                self.logger.warning(e.message)
        return True

    def poll_input(self, stdscr) -> bool:
        """Drain pending keys; returns False when the game should end."""
        while True:
            key = stdscr.getch()
            if key == -1:
                return True
            if not self.handle_command(map_key(key)):
                return False

    def render_frame(self, stdscr):
        # has_state_changed() must run every frame to keep its cache current
        state_changed = self.machine.has_state_changed()
        if self.machine.any_spinning() or state_changed:
            self.renderer.draw(stdscr)

    def _main(self, stdscr):
        curses.curs_set(0)
        stdscr.nodelay(True)
        stdscr.keypad(True)
        self.renderer.init_colors()
        self.renderer.draw_initial_screen(stdscr)

        self.running = True
        while self.running:
            self.running = self.poll_input(stdscr)
            if self.running:
                self.render_frame(stdscr)
                time.sleep(self.render_interval)
