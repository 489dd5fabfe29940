# slot_reels/main.py
import os
import sys
import json
import logging
import argparse

from slot_reels.infrastructure.config.loaders.yaml_loader import YamlConfigLoader, ConfigError
from slot_reels.infrastructure.config.validators.schema_validator import SchemaValidator
from slot_reels.infrastructure.logging.log_manager import initialize_logging, DEFAULT_LOGGING_CONFIG
from slot_reels.infrastructure.rng.rng_provider import RNGProvider

from slot_reels.domain.events.event_dispatcher import EventDispatcher
from slot_reels.domain.events.machine_events import MachineEvent
from slot_reels.domain.machine.errors import StateAccessFailure
from slot_reels.domain.machine.factories.machine_factory import MachineFactory

from slot_reels.application.simulation.autoplay_runner import AutoplayRunner, RoundTimeoutError


PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
CONFIG_DIR = os.path.join(PACKAGE_DIR, "application", "config")
DEFAULT_MACHINE_CONFIG = os.path.join(CONFIG_DIR, "machines", "default_machine.yaml")
MACHINE_SCHEMA = os.path.join(CONFIG_DIR, "schemas", "machine_schema.json")


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Three-reel terminal slot machine")

    parser.add_argument(
        "-c", "--config",
        default=DEFAULT_MACHINE_CONFIG,
        help="Path to machine configuration file"
    )

    parser.add_argument(
        "--autoplay",
        type=int,
        metavar="ROUNDS",
        default=None,
        help="Play ROUNDS rounds without the terminal UI and print hit statistics"
    )

    parser.add_argument(
        "--report",
        metavar="PATH",
        default=None,
        help="Write the autoplay statistics as JSON to PATH"
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the reel RNG (overrides the configuration)"
    )

    parser.add_argument(
        "--tick-ms",
        type=int,
        default=None,
        help="Reel tick interval in milliseconds (overrides the configuration)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--log-mode",
        choices=["all", "core", "app", "none"],
        default=None,
        help="Select logging mode: 'all'=verbose, 'core'=reel machine only, 'app'=application only, 'none'=minimal"
    )

    args = parser.parse_args(argv)
    if args.autoplay is not None and args.autoplay < 1:
        parser.error("--autoplay needs at least one round")
    if args.tick_ms is not None and args.tick_ms < 1:
        parser.error("--tick-ms must be positive")
    return args


def build_logging_config(config, args):
    """Merge the configuration's logging section with the command line switches."""
    log_config = dict(config.get("logging") or DEFAULT_LOGGING_CONFIG)
    log_config["loggers"] = dict(log_config.get("loggers", {}))

    if args.log_mode == "all":
        log_config["level"] = "DEBUG"
        log_config["console_level"] = "DEBUG"
    elif args.log_mode == "core":
        log_config["level"] = "WARNING"
        log_config["loggers"]["domain"] = {"level": "DEBUG"}
        log_config["loggers"]["application"] = {"level": "WARNING"}
    elif args.log_mode == "app":
        log_config["level"] = "WARNING"
        log_config["loggers"]["domain"] = {"level": "WARNING"}
        log_config["loggers"]["application"] = {"level": "DEBUG"}
    elif args.log_mode == "none":
        log_config["level"] = "WARNING"
        log_config["console_level"] = "WARNING"

    if args.verbose:
        log_config["level"] = "DEBUG"
        log_config["console_level"] = "DEBUG"

    # The terminal UI owns stdout; logs go to the file only
    if args.autoplay is None:
        log_config["console"] = False

    return log_config


def print_summary(stats, machine):
    print("\nAutoplay Summary:")
    print(f"- Machine: {stats.machine_id}")
    print(f"- Rounds: {stats.total_rounds}")
    print(f"- Winning rounds: {stats.win_rounds} ({stats.hit_rate:.2%})")
    print(f"- Line hits: {stats.total_line_hits}")
    print("\nHits per payline:")
    for i, hits in enumerate(stats.line_hits):
        print(f"  {machine.evaluator.describe(i)}: {hits}")
    if stats.symbol_hits:
        print("\nHits per symbol:")
        for symbol, hits in sorted(stats.symbol_hits.items(), key=lambda item: -item[1]):
            print(f"  {symbol}: {hits}")
    print(f"\nTotal execution time: {stats.sim_duration:.2f} seconds")


def main(argv=None):
    """Main entry point for the slot machine."""
    args = parse_arguments(argv)

    config_loader = YamlConfigLoader(SchemaValidator())
    try:
        config = config_loader.load_file(args.config, MACHINE_SCHEMA, apply_defaults=True)
    except ConfigError as e:
        print(f"Error loading configuration: {str(e)}", file=sys.stderr)
        return 1

    if args.seed is not None:
        config.setdefault("rng", {})["seed"] = args.seed
    if args.tick_ms is not None:
        config["tick_interval_ms"] = args.tick_ms
    if "machine_id" not in config:
        config["machine_id"] = os.path.splitext(os.path.basename(args.config))[0]

    logs = initialize_logging(build_logging_config(config, args))
    logger = logging.getLogger("main")
    logger.info(f"Slot machine starting with configuration {args.config}")

    event_dispatcher = EventDispatcher()
    event_dispatcher.register_for_class(
        MachineEvent, lambda event: logger.debug(f"{event} {event.data}")
    )

    rng_provider = RNGProvider()
    factory = MachineFactory(rng_provider, event_dispatcher)

    try:
        machine = factory.create_machine(config)
    except ValueError as e:
        logger.error(f"Invalid machine configuration: {str(e)}")
        print(f"Invalid machine configuration: {str(e)}", file=sys.stderr)
        logs.shutdown()
        return 1

    try:
        if args.autoplay is not None:
            delay_rng = rng_provider.create_from_config(config.get("rng") or {}, stream="delays")
            runner = AutoplayRunner(machine, delay_rng, config.get("autoplay"), event_dispatcher)
            stats = runner.run(args.autoplay)
            print_summary(stats, machine)

            if args.report:
                report_dir = os.path.dirname(args.report)
                if report_dir:
                    os.makedirs(report_dir, exist_ok=True)
                with open(args.report, 'w', encoding='utf-8') as f:
                    json.dump(stats.to_dict(), f, indent=2, ensure_ascii=False)
                logger.info(f"Autoplay report saved to {args.report}")
        else:
            # curses is only needed for the interactive mode
            from slot_reels.application.terminal.game_loop import TerminalGame

            render_interval = config.get("render_interval_ms", 35) / 1000.0
            TerminalGame(machine, render_interval).run()
            print("Game over. Thanks for playing!")

        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except (StateAccessFailure, RoundTimeoutError) as e:
        logger.exception(f"Machine failure: {str(e)}")
        print(f"Machine failure: {str(e)}", file=sys.stderr)
        return 1
    except ValueError as e:
        logger.error(f"Invalid machine configuration: {str(e)}")
        print(f"Invalid machine configuration: {str(e)}", file=sys.stderr)
        return 1
    finally:
        machine.shutdown(wait=True)
        logs.shutdown()


if __name__ == "__main__":
    sys.exit(main())
