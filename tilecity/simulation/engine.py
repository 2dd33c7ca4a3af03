"""SimulationEngine — the session context and main tick loop.

Owns every piece of per-session state and advances it in a fixed tick
order:

1. Refresh road access (buildings that lost their road revert)
2. Update pollution and land-value fields, snapshot onto cells
3. Zone growth, decline and struggle tracking
4. Finances and city metrics

Player commands (``place_tile``) and timer callbacks run between ticks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
from numpy.random import Generator

from tilecity.catalog.tile_types import (
    CITY_HALL_ID,
    GRASS_ID,
    NATURAL_PARK_ID,
    ROAD_ID,
    WATER_ID,
    find_by_id,
)
from tilecity.economy.ledger import Ledger, TickReport
from tilecity.fields.simulator import FieldSimulator
from tilecity.world.generation import generate_terrain
from tilecity.world.grid import GridStore
from tilecity.zones.lifecycle import ZoneLifecycle
from tilecity.zones.scheduler import VirtualScheduler

if TYPE_CHECKING:
    from tilecity.catalog.tile_types import TileTypeDefinition
    from tilecity.simulation.config import SimulationConfig
    from tilecity.world.cell import GridCell

logger = logging.getLogger(__name__)


@dataclass
class SimulationEngine:
    """Drives a city session forward tick by tick.

    Attributes:
        config: Loaded simulation configuration.
        scheduler: Virtual clock for zone-development timers.
        rng: Master seeded random generator.
        grid: The city grid.
        field_simulator: Pollution and land-value fields.
        lifecycle: Zone development, growth and decline.
        ledger: Budget and city metrics.
        tick: Number of ticks run so far.
    """

    config: SimulationConfig
    scheduler: VirtualScheduler = field(init=False)
    rng: Generator = field(init=False)
    grid: GridStore = field(init=False)
    field_simulator: FieldSimulator = field(init=False)
    lifecycle: ZoneLifecycle = field(init=False)
    ledger: Ledger = field(init=False)
    tick: int = 0

    def __post_init__(self) -> None:
        """Build the grid, fields, lifecycle and ledger from config."""
        self.scheduler = VirtualScheduler()
        self.rng = np.random.default_rng(self.config.seed)
        self.grid = GridStore(
            width=self.config.grid_width,
            height=self.config.grid_height,
            scheduler=self.scheduler,
        )
        self.field_simulator = FieldSimulator(
            width=self.config.grid_width,
            height=self.config.grid_height,
        )
        self.lifecycle = ZoneLifecycle(
            grid=self.grid,
            fields=self.field_simulator,
            scheduler=self.scheduler,
            rng=self.rng,
            delay_min=self.config.development_delay_min,
            delay_max=self.config.development_delay_max,
        )
        self.ledger = Ledger(
            config=self.config,
            budget=self.config.initial_budget,
        )
        if self.config.generate_map:
            self.generate_map()

    # -- Queries -------------------------------------------------------------

    @property
    def budget(self) -> float:
        return self.ledger.budget

    @property
    def population(self) -> int:
        return self.ledger.population

    @property
    def employment_rate(self) -> float:
        return self.ledger.employment_rate

    @property
    def city_satisfaction(self) -> float:
        return self.ledger.city_satisfaction

    @property
    def last_report(self) -> TickReport:
        return self.ledger.last_report

    @property
    def now(self) -> float:
        """Current scheduler time in seconds."""
        return self.scheduler.now

    def get_tile(self, x: int, y: int) -> GridCell | None:
        """Return the live cell at ``(x, y)``, or None out of bounds."""
        return self.grid.get_tile(x, y)

    def snapshot(self) -> list[list[GridCell]]:
        """Return a detached copy of the grid for renderers."""
        return self.grid.snapshot()

    def get_pollution_at(self, x: int, y: int) -> float | None:
        return self.field_simulator.pollution_at(x, y)

    def get_tile_value_at(self, x: int, y: int) -> float | None:
        return self.field_simulator.tile_value_at(x, y)

    # -- Commands ------------------------------------------------------------

    def place_tile(self, x: int, y: int, tile_type_id: str) -> bool:
        """Apply a player build or bulldoze command.

        Placing grass bulldozes the cell.  Bulldozing costs
        ``bulldoze_cost`` except for roads, which are removed for free.
        Building on a slope adds ``slope_cost_factor`` of the price per
        elevation step to the steepest land neighbour.  Replacing a
        non-grass tile clears its population and field snapshots.

        Args:
            x: Column index.
            y: Row index.
            tile_type_id: Catalog id or key of the tile to place.

        Returns:
            True if the grid changed and the cost was paid; False if the
            command was rejected, in which case nothing changed.
        """
        new_type = find_by_id(tile_type_id)
        cell = self.grid.get_tile(x, y)
        if new_type is None or cell is None:
            logger.debug("Rejected %r at (%d, %d): unknown", tile_type_id, x, y)
            return False
        current = cell.type

        # Buildings, obstacles and natural parks only arise from the simulation
        if new_type.is_building or new_type.is_obstacle:
            return False
        if new_type.id == NATURAL_PARK_ID:
            return False
        if current.is_obstacle or current.id == CITY_HALL_ID:
            return False
        if current.id == WATER_ID and new_type.id not in (WATER_ID, GRASS_ID):
            return False
        if current.id == new_type.id:
            return False

        bulldozing = new_type.id == GRASS_ID
        if bulldozing:
            cost = 0.0 if current.id == ROAD_ID else self.config.bulldoze_cost
        else:
            cost = float(new_type.cost)
            slope = self.slope_at(x, y, new_type)
            cost += cost * slope * self.config.slope_cost_factor
        if cost > self.ledger.budget:
            logger.debug(
                "Rejected %s at (%d, %d): costs %.1f, budget %.1f",
                new_type.id,
                x,
                y,
                cost,
                self.ledger.budget,
            )
            return False

        if not self.grid.set_tile_type(x, y, new_type):
            return False
        self.ledger.spend(cost)
        if current.id != GRASS_ID:
            self.grid.clear_tile_data(x, y)
            cell.has_road_access = self.grid.has_road_access(x, y)

        if new_type.is_developable_zone:
            self.lifecycle.attempt_zone_development(x, y)
        if ROAD_ID in (new_type.id, current.id):
            self.lifecycle.refresh_road_access()
        if new_type.id == ROAD_ID:
            for neighbour in self.grid.neighbours(x, y):
                if neighbour.type.is_developable_zone:
                    self.lifecycle.attempt_zone_development(
                        neighbour.x,
                        neighbour.y,
                    )
        return True

    def slope_at(self, x: int, y: int, tile_type: TileTypeDefinition) -> int:
        """Return the largest elevation step from ``(x, y)`` to a neighbour.

        Obstacles are ignored, and so is water unless ``tile_type`` is
        water itself.
        """
        cell = self.grid.get_tile(x, y)
        if cell is None:
            return 0
        steepest = 0
        for neighbour in self.grid.neighbours(x, y):
            if neighbour.type.is_obstacle:
                continue
            if neighbour.type.id == WATER_ID and tile_type.id != WATER_ID:
                continue
            steepest = max(steepest, abs(cell.elevation - neighbour.elevation))
        return steepest

    def run_tick(self) -> TickReport:
        """Advance the simulation by one tick.

        Returns:
            The finances of the tick.
        """
        self.lifecycle.refresh_road_access()
        self.field_simulator.step(self.grid)
        self.lifecycle.update()
        report = self.ledger.process(self.grid)
        self.tick += 1
        return report

    def step(self) -> TickReport:
        """Alias of ``run_tick``."""
        return self.run_tick()

    def run(self, ticks: int) -> None:
        """Run the simulation for a fixed number of ticks.

        Args:
            ticks: Number of ticks to advance.
        """
        for _ in range(ticks):
            self.run_tick()

    def advance_time(self, seconds: float) -> int:
        """Advance the scheduler clock, firing due development timers.

        Returns:
            Number of timers fired.
        """
        return self.scheduler.advance(seconds)

    def reset_grid(self) -> None:
        """Return to an all-grass grid with fresh fields and no timers."""
        self.grid.reset_to_grass()
        self.scheduler.clear()
        self.field_simulator.reset()

    def generate_map(self, seed: int | None = None) -> None:
        """Reset the grid, then generate river, mountains, parks and city hall.

        Args:
            seed: Optional seed for this map; the engine's own generator
                is used when omitted.
        """
        self.reset_grid()
        rng = self.rng if seed is None else np.random.default_rng(seed)
        generate_terrain(self.grid, rng, self.config.max_elevation_level)
        self.grid.refresh_road_access()
        logger.info(
            "Generated %dx%d map, city hall at %s",
            self.grid.width,
            self.grid.height,
            self.grid.city_hall,
        )
