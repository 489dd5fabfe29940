# slot_reels/domain/machine/services/win_evaluation.py
import logging
from typing import List, Sequence, Tuple

Payline = Tuple[int, int, int]
Snapshot = Sequence[Sequence[str]]

ROW_COUNT = 3

# Rows per reel: top, middle, bottom, then both diagonals.
STANDARD_PAYLINES: Tuple[Payline, ...] = (
    (0, 0, 0),
    (1, 1, 1),
    (2, 2, 2),
    (0, 1, 2),
    (2, 1, 0),
)

# Standard lines plus the V and inverted V.
EXTENDED_PAYLINES: Tuple[Payline, ...] = STANDARD_PAYLINES + (
    (0, 1, 0),
    (2, 1, 2),
)


def normalize_paylines(paylines: Sequence[Sequence[int]], reel_count: int = 3) -> Tuple[Payline, ...]:
    """
    Validate a payline table and freeze it into tuples.

    Args:
        paylines: Sequence of row-index triples, one row per reel
        reel_count: Number of reels each line must cover

    Returns:
        Immutable payline table

    Raises:
        ValueError: If the table is empty or a line is malformed
    """
    if not paylines:
        raise ValueError("Payline table must contain at least one line")

    table = []
    for i, line in enumerate(paylines):
        rows = tuple(line)
        if len(rows) != reel_count:
            raise ValueError(f"Payline {i} must have {reel_count} rows, got {list(rows)}")
        for row in rows:
            if isinstance(row, bool) or not isinstance(row, int) or not 0 <= row < ROW_COUNT:
                raise ValueError(f"Payline {i} has invalid row {row!r}: expected 0..{ROW_COUNT - 1}")
        table.append(rows)
    return tuple(table)


def check_winnings(snapshot: Snapshot, paylines: Sequence[Payline]) -> List[int]:
    """
    Find every payline whose three symbols match.

    Pure function over a snapshot of visible symbols; it does not care
    whether the reels were at rest when the snapshot was taken.

    Args:
        snapshot: snapshot[reel][row] visible symbols for each reel
        paylines: Payline table to check, in display order

    Returns:
        Indices of winning lines, in table order
    """
    winning_lines = []
    for line_index, line in enumerate(paylines):
        symbols = [snapshot[reel_index][row] for reel_index, row in enumerate(line)]
        if symbols[0] == symbols[1] == symbols[2]:
            winning_lines.append(line_index)
    return winning_lines


class WinEvaluator:
    """
    Evaluates snapshots against one fixed payline table.
    """
    def __init__(self, paylines: Sequence[Sequence[int]], names: Sequence[str] = ()):
        """
        Args:
            paylines: Payline table, validated on construction
            names: Optional display names, one per line
        """
        self.paylines = normalize_paylines(paylines)
        self.names = tuple(names) or tuple(f"Line {i + 1}" for i in range(len(self.paylines)))
        if len(self.names) != len(self.paylines):
            raise ValueError(f"Got {len(self.names)} payline names for {len(self.paylines)} lines")
        self.logger = logging.getLogger("domain.machine.win_evaluator")

    def evaluate(self, snapshot: Snapshot) -> List[int]:
        winning_lines = check_winnings(snapshot, self.paylines)
        if winning_lines:
            self.logger.debug(f"Winning lines: {winning_lines}")
        return winning_lines

    def describe(self, line_index: int) -> str:
        """Human readable form of a line, with 1-based rows, e.g. 'Line 4: [1, 2, 3]'."""
        rows = ", ".join(str(row + 1) for row in self.paylines[line_index])
        return f"{self.names[line_index]}: [{rows}]"

    def __len__(self) -> int:
        return len(self.paylines)
