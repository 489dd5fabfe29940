# slot_reels/infrastructure/rng/strategies/numpy_rng.py
import numpy as np
from typing import Optional


class NumpyRNG:
    """
    NumPy RandomState backed generator.
    """
    def __init__(self, seed_value: Optional[int] = None):
        self.state = np.random.RandomState(seed_value)

    def start_position(self, reel_length: int) -> int:
        if reel_length < 1:
            raise ValueError(f"Reel length must be positive, got {reel_length}")
        # Upper bound is exclusive
        return int(self.state.randint(0, reel_length))

    def stop_delay(self, low: float, high: float) -> float:
        return float(self.state.uniform(low, high))

    def seed(self, seed_value: int) -> None:
        self.state.seed(seed_value)
