# slot_reels/domain/machine/factories/machine_factory.py
import logging
import os
from typing import Dict, Any, List, Optional

from slot_reels.domain.events.event_dispatcher import EventDispatcher
from slot_reels.infrastructure.rng.rng_provider import RNGProvider
from ..entities.reel import Reel
from ..entities.slot_machine import SlotMachine
from ..entities.symbol_table import SymbolTable
from ..services.win_evaluation import WinEvaluator, STANDARD_PAYLINES


class MachineFactory:
    """
    Factory for creating SlotMachine instances from configuration.
    """
    def __init__(self, rng_provider: Optional[RNGProvider] = None,
                 event_dispatcher: Optional[EventDispatcher] = None):
        """
        Args:
            rng_provider: Provider for the RNG that picks initial reel positions
            event_dispatcher: Dispatcher handed to every machine created
        """
        self.logger = logging.getLogger("domain.machine.factory")
        self.rng_provider = rng_provider or RNGProvider()
        self.event_dispatcher = event_dispatcher

    def create_machine(self, config: Dict[str, Any], machine_id: Optional[str] = None) -> SlotMachine:
        """
        Create a new slot machine at rest.

        Args:
            config: Machine configuration dictionary
            machine_id: Optional explicit id (overrides config)

        Returns:
            Initialized SlotMachine instance

        Raises:
            ValueError: If the reels or paylines are malformed
        """
        machine_id = machine_id or config.get("machine_id", "classic")
        self.logger.info(f"Creating slot machine: {machine_id}")

        rng_config = config.get("rng") or {}
        rng = self.rng_provider.create_from_config(rng_config)
        self.logger.debug(f"Using RNG strategy: {rng_config.get('strategy', 'mersenne')}, "
                          f"seed: {rng_config.get('seed')}")

        lock_timeout = config.get("lock_timeout_ms", 1000) / 1000.0
        reels = self._build_reels(config.get("reels", []), rng, lock_timeout)
        evaluator = self._build_evaluator(config.get("paylines", []))
        tick_interval = config.get("tick_interval_ms", 100) / 1000.0

        return SlotMachine(
            machine_id,
            reels,
            evaluator,
            tick_interval=tick_interval,
            event_dispatcher=self.event_dispatcher
        )

    def create_machine_from_file(self, config_loader, file_path: str,
                                 schema_path: Optional[str] = None,
                                 machine_id: Optional[str] = None) -> SlotMachine:
        """
        Create a machine from a configuration file.

        Args:
            config_loader: Configuration loader instance
            file_path: Path to the machine YAML file
            schema_path: Optional JSON schema to validate against
            machine_id: Optional explicit machine ID (overrides ID in config)
        """
        self.logger.info(f"Creating machine from file: {file_path}")

        config = config_loader.load_file(file_path, schema_path, apply_defaults=True)

        if machine_id is None and "machine_id" not in config:
            machine_id = os.path.splitext(os.path.basename(file_path))[0]

        return self.create_machine(config, machine_id)

    def _build_reels(self, reels_config: List[Dict[str, Any]], rng, lock_timeout: float) -> List[Reel]:
        """
        Build the three reels, each at a uniformly random starting position.
        """
        if len(reels_config) != SlotMachine.REEL_COUNT:
            raise ValueError(f"Expected {SlotMachine.REEL_COUNT} reel strips, got {len(reels_config)}")

        reels = []
        for reel_id, reel_config in enumerate(reels_config):
            name = reel_config.get("name", f"reel{reel_id + 1}")
            table = SymbolTable(reel_config.get("symbols", []), name)
            position = rng.start_position(len(table))
            reels.append(Reel(table, reel_id, position=position, lock_timeout=lock_timeout))
            self.logger.debug(f"Loaded reel {name} with {len(table)} symbols, starting at {position}")
        return reels

    def _build_evaluator(self, paylines_config: List[Dict[str, Any]]) -> WinEvaluator:
        if not paylines_config:
            self.logger.warning("No paylines configured, using the standard five lines")
            return WinEvaluator(STANDARD_PAYLINES)

        rows = [entry.get("rows", []) for entry in paylines_config]
        names = [entry.get("name", f"Line {i + 1}") for i, entry in enumerate(paylines_config)]
        return WinEvaluator(rows, names)
