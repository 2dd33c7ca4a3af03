"""Config — load session parameters from YAML files.

Grid dimensions, the starting budget, timer delays, terrain height and
the tax-bracket calibration live in YAML and are parsed into a typed
dataclass here.
Rule constants that every session shares are in ``constants.py``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml


@dataclass
class SimulationConfig:
    """Top-level simulation configuration.

    Attributes:
        seed: RNG seed for map generation and development delays.
        grid_width: Number of grid columns.
        grid_height: Number of grid rows.
        initial_budget: Funds available at the start of a session.
        bulldoze_cost: Price of clearing a non-road tile back to grass.
        generate_map: Run procedural terrain generation on start-up.
            When False the session starts on an all-grass grid.
        tick_interval: Wall-clock seconds between ticks for drivers.
        development_delay_min: Shortest zone-development delay (seconds).
        development_delay_max: Longest zone-development delay (seconds).
        r_tax_desirability_threshold_severe: Residential tile value below
            which only the severe tax fraction is collected.
        r_tax_desirability_threshold_low: Residential tile value below
            which only the low tax fraction is collected.
        ci_tax_population_ratio_severe: Commercial/industrial population
            ratio below which only the severe tax fraction is collected.
        ci_tax_population_ratio_low: Commercial/industrial population
            ratio below which only the low tax fraction is collected.
        severe_tax_multiplier: Fraction of nominal tax in the severe band.
        low_tax_multiplier: Fraction of nominal tax in the low band.
        struggling_tax_multiplier: Extra fraction applied to buildings
            flagged as visually struggling.
        max_elevation_level: Highest terrain elevation step produced by
            map generation.
        slope_cost_factor: Build-price surcharge per elevation step of
            difference to the steepest land neighbour.
    """

    seed: int = 42
    grid_width: int = 25
    grid_height: int = 25
    initial_budget: float = 5000.0
    bulldoze_cost: float = 5.0
    generate_map: bool = True
    tick_interval: float = 2.0

    development_delay_min: float = 5.0
    development_delay_max: float = 10.0

    # Tax brackets
    r_tax_desirability_threshold_severe: float = 30.0
    r_tax_desirability_threshold_low: float = 60.0
    ci_tax_population_ratio_severe: float = 0.2
    ci_tax_population_ratio_low: float = 0.5
    severe_tax_multiplier: float = 0.05
    low_tax_multiplier: float = 0.3
    struggling_tax_multiplier: float = 0.5

    # Terrain
    max_elevation_level: int = 4
    slope_cost_factor: float = 0.25

    @classmethod
    def from_yaml(cls, path: str | Path) -> SimulationConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML config file.

        Returns:
            A populated SimulationConfig instance.

        Raises:
            FileNotFoundError: If the config file does not exist.
        """
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}

        return cls(
            seed=data.get("seed", cls.seed),
            grid_width=data.get("grid_width", cls.grid_width),
            grid_height=data.get("grid_height", cls.grid_height),
            initial_budget=data.get("initial_budget", cls.initial_budget),
            bulldoze_cost=data.get("bulldoze_cost", cls.bulldoze_cost),
            generate_map=data.get("generate_map", cls.generate_map),
            tick_interval=data.get("tick_interval", cls.tick_interval),
            development_delay_min=data.get(
                "development_delay_min",
                cls.development_delay_min,
            ),
            development_delay_max=data.get(
                "development_delay_max",
                cls.development_delay_max,
            ),
            r_tax_desirability_threshold_severe=data.get(
                "r_tax_desirability_threshold_severe",
                cls.r_tax_desirability_threshold_severe,
            ),
            r_tax_desirability_threshold_low=data.get(
                "r_tax_desirability_threshold_low",
                cls.r_tax_desirability_threshold_low,
            ),
            ci_tax_population_ratio_severe=data.get(
                "ci_tax_population_ratio_severe",
                cls.ci_tax_population_ratio_severe,
            ),
            ci_tax_population_ratio_low=data.get(
                "ci_tax_population_ratio_low",
                cls.ci_tax_population_ratio_low,
            ),
            severe_tax_multiplier=data.get(
                "severe_tax_multiplier",
                cls.severe_tax_multiplier,
            ),
            low_tax_multiplier=data.get(
                "low_tax_multiplier",
                cls.low_tax_multiplier,
            ),
            struggling_tax_multiplier=data.get(
                "struggling_tax_multiplier",
                cls.struggling_tax_multiplier,
            ),
            max_elevation_level=data.get(
                "max_elevation_level",
                cls.max_elevation_level,
            ),
            slope_cost_factor=data.get(
                "slope_cost_factor",
                cls.slope_cost_factor,
            ),
        )
