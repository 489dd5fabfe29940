# slot_reels/infrastructure/rng/rng_provider.py
import logging
from typing import Optional, Dict, Any, Tuple

from .strategies.mersenne_rng import MersenneTwisterRNG
from .strategies.numpy_rng import NumpyRNG
from .strategies.rng_strategy import RNGStrategy


STRATEGIES = {
    "mersenne": (MersenneTwisterRNG, "Mersenne Twister (Python's random module)"),
    "numpy": (NumpyRNG, "NumPy RandomState"),
}

# NumPy RandomState only accepts 32-bit seeds
SEED_SPACE = 2 ** 32

# Independent streams drawn from one configured seed
STREAM_OFFSETS = {
    "positions": 0,
    "delays": 1,
}


class RNGProvider:
    """
    Creates the RNG streams used for reel start positions and autoplay
    stop delays.

    A configured seed makes every stream reproducible; each stream gets its
    own derived seed so the delays do not mirror the positions. Unseeded
    streams are created once and shared.
    """
    def __init__(self):
        self.logger = logging.getLogger("infrastructure.rng")
        self._shared: Dict[Tuple[str, str], RNGStrategy] = {}

    def get_rng(self, strategy_name: str, seed: Optional[int] = None,
                stream: str = "positions") -> RNGStrategy:
        """
        Get the generator for one stream.

        Args:
            strategy_name: "mersenne" or "numpy" (case-insensitive)
            seed: Base seed, None for an unseeded shared generator
            stream: "positions" or "delays"

        Raises:
            ValueError: If the strategy or stream is unknown
        """
        strategy_name = strategy_name.lower()
        if strategy_name not in STRATEGIES:
            self.logger.error(f"Unknown RNG strategy: {strategy_name}")
            raise ValueError(f"Unknown RNG strategy: {strategy_name}")
        if stream not in STREAM_OFFSETS:
            raise ValueError(f"Unknown RNG stream: {stream}")

        strategy_cls = STRATEGIES[strategy_name][0]

        if seed is None:
            key = (strategy_name, stream)
            if key not in self._shared:
                self.logger.debug(f"Creating unseeded {strategy_name} RNG for {stream}")
                self._shared[key] = strategy_cls()
            return self._shared[key]

        stream_seed = (seed + STREAM_OFFSETS[stream]) % SEED_SPACE
        self.logger.debug(f"Creating {strategy_name} RNG for {stream} with seed {stream_seed}")
        return strategy_cls(stream_seed)

    def create_from_config(self, config: Dict[str, Any], stream: str = "positions") -> RNGStrategy:
        """
        Create a stream from the "rng" section of a machine configuration.

        Example config:
            {"strategy": "numpy", "seed": 12345}
        """
        return self.get_rng(config.get("strategy") or "mersenne", config.get("seed"), stream)

    @staticmethod
    def get_available_strategies() -> Dict[str, str]:
        return {name: description for name, (_, description) in STRATEGIES.items()}
