"""Entry point for ``python -m tilecity``.

Loads the YAML config, builds a simulation engine and runs it headless
for a number of ticks, logging the city metrics after each one.
"""

from __future__ import annotations

import argparse
import logging
import pathlib

from tilecity.simulation.config import SimulationConfig
from tilecity.simulation.engine import SimulationEngine

_DEFAULT_CONFIG = (
    pathlib.Path(__file__).resolve().parent.parent / "config" / "default.yaml"
)

logger = logging.getLogger("tilecity")


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="tilecity",
        description="tilecity - headless tile-based city simulation",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=pathlib.Path,
        default=None,
        help=(
            "Path to YAML config file (default: config/default.yaml when "
            "present, otherwise built-in defaults)"
        ),
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=50,
        help="Number of simulation ticks to run (default: 50)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Override the seed from the config file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse CLI args, create the engine and run it."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.config is not None:
        config = SimulationConfig.from_yaml(args.config)
    elif _DEFAULT_CONFIG.is_file():
        config = SimulationConfig.from_yaml(_DEFAULT_CONFIG)
    else:
        logger.debug("No %s; using built-in defaults", _DEFAULT_CONFIG)
        config = SimulationConfig()
    if args.seed is not None:
        config.seed = args.seed
    engine = SimulationEngine(config=config)

    for _ in range(args.ticks):
        engine.advance_time(config.tick_interval)
        report = engine.run_tick()
        logger.info(
            "tick %d: budget %.1f (net %+.1f), population %d, "
            "employment %.1f%%, satisfaction %.1f%%",
            engine.tick,
            engine.budget,
            report.net,
            engine.population,
            engine.employment_rate,
            engine.city_satisfaction,
        )


if __name__ == "__main__":
    main()
