# slot_reels/application/analysis/round_stats.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Any, Optional, Sequence


@dataclass
class RoundStats:
    """Hit statistics collected over a run of autoplay rounds."""
    machine_id: str
    payline_count: int
    sim_start_time: Optional[datetime] = None
    sim_end_time: Optional[datetime] = None
    sim_duration: float = 0.0

    total_rounds: int = 0
    win_rounds: int = 0
    total_line_hits: int = 0
    hit_rate: float = 0.0
    max_lines_in_round: int = 0
    line_hits: List[int] = field(default_factory=list)
    symbol_hits: Dict[str, int] = field(default_factory=dict)

    def __post_init__(self):
        if not self.line_hits:
            self.line_hits = [0] * self.payline_count

    def record_round(self, snapshot: Sequence[Sequence[str]], winning_lines: Sequence[int],
                     paylines: Sequence[Sequence[int]]):
        """
        Update the counters with one settled round.

        Args:
            snapshot: Visible symbols the round settled on, [reel][row]
            winning_lines: Indices returned by check_winnings
            paylines: Payline table the round was evaluated with
        """
        self.total_rounds += 1
        if winning_lines:
            self.win_rounds += 1
        self.total_line_hits += len(winning_lines)
        self.max_lines_in_round = max(self.max_lines_in_round, len(winning_lines))

        for line_index in winning_lines:
            self.line_hits[line_index] += 1
            symbol = snapshot[0][paylines[line_index][0]]
            self.symbol_hits[symbol] = self.symbol_hits.get(symbol, 0) + 1

        self.hit_rate = self.win_rounds / self.total_rounds

    def to_dict(self) -> Dict[str, Any]:
        return {
            "machine_id": self.machine_id,
            "payline_count": self.payline_count,
            "sim_start_time": self.sim_start_time.strftime('%Y-%m-%d %H:%M:%S') if self.sim_start_time else None,
            "sim_end_time": self.sim_end_time.strftime('%Y-%m-%d %H:%M:%S') if self.sim_end_time else None,
            "sim_duration": self.sim_duration,
            "total_rounds": self.total_rounds,
            "win_rounds": self.win_rounds,
            "total_line_hits": self.total_line_hits,
            "hit_rate": self.hit_rate,
            "max_lines_in_round": self.max_lines_in_round,
            "line_hits": list(self.line_hits),
            "symbol_hits": dict(self.symbol_hits),
        }
