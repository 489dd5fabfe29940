# slot_reels/infrastructure/rng/strategies/rng_strategy.py
from typing import Protocol


class RNGStrategy(Protocol):
    """Random source for the two decisions the game leaves to chance."""

    def start_position(self, reel_length: int) -> int:
        """
        Uniform starting index for a reel strip.

        Args:
            reel_length: Number of symbols on the strip

        Returns:
            Index in [0, reel_length)
        """
        ...

    def stop_delay(self, low: float, high: float) -> float:
        """Seconds to wait before an automatic stop, uniform in [low, high]."""
        ...

    def seed(self, seed_value: int) -> None:
        ...
