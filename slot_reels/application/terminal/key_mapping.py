# slot_reels/application/terminal/key_mapping.py
import curses
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class CommandType(Enum):
    START_ALL = auto()
    STOP = auto()
    EXIT = auto()


@dataclass(frozen=True)
class ReelCommand:
    type: CommandType
    index: Optional[int] = None


ESCAPE_KEY = 27

STOP_KEYS = {
    curses.KEY_LEFT: 0,
    curses.KEY_DOWN: 1,
    curses.KEY_RIGHT: 2,
}

EXIT_KEYS = {ESCAPE_KEY, ord('q'), ord('Q')}

# Printable blanks only; Enter and Tab are control keys
START_KEYS = {ord(' '), 0x3000}


def map_key(key: int) -> Optional[ReelCommand]:
    """
    Translate a curses key code into a machine command.

    Space (or an ideographic space) starts all reels, the arrow keys stop the
    left, middle and right reel, Esc or q quits. Anything else is ignored.
    """
    if key in STOP_KEYS:
        return ReelCommand(CommandType.STOP, STOP_KEYS[key])
    if key in EXIT_KEYS:
        return ReelCommand(CommandType.EXIT)
    if key in START_KEYS:
        return ReelCommand(CommandType.START_ALL)
    return None
