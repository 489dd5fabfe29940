# slot_reels/infrastructure/rng/strategies/mersenne_rng.py
import random
from typing import Optional


class MersenneTwisterRNG:
    """
    Mersenne Twister via a private random.Random instance.
    """
    def __init__(self, seed_value: Optional[int] = None):
        self._random = random.Random(seed_value)

    def start_position(self, reel_length: int) -> int:
        if reel_length < 1:
            raise ValueError(f"Reel length must be positive, got {reel_length}")
        return self._random.randrange(reel_length)

    def stop_delay(self, low: float, high: float) -> float:
        return self._random.uniform(low, high)

    def seed(self, seed_value: int) -> None:
        self._random.seed(seed_value)
