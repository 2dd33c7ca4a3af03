"""ZoneLifecycle — growth, decline and development of RCI tiles.

Three independent paths change a zoned tile's type:

- **Timed development**: an empty zone schedules a one-shot timer when
  placed.  When it fires, the zone becomes a level-1 building if it is
  unchanged and still touches a road.
- **Population thresholds**: every tick a building grows or declines.
  Growing past capacity levels it up; declining to zero levels it down
  (or back to its zone).
- **Road loss**: a building whose last adjacent road disappears reverts
  to its zone in the same road-access refresh.

Buildings also track how long they have been under-populated and raise a
sticky ``is_visually_struggling`` flag used by the ledger.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tilecity.catalog.tile_types import ZoneCategory, get_tile_type
from tilecity.simulation import constants as C

if TYPE_CHECKING:
    from numpy.random import Generator

    from tilecity.catalog.tile_types import TileTypeDefinition
    from tilecity.fields.simulator import FieldSimulator
    from tilecity.world.cell import GridCell
    from tilecity.world.grid import GridStore
    from tilecity.zones.scheduler import Scheduler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryRules:
    """Growth/decline tuning for one RCI category.

    Attributes:
        density_penalty: Growth-factor penalty per population unit.
        growth_threshold: Growth factor required to grow.
        min_desirability_for_growth: Tile value required to grow.
        decline_desirability_threshold: Tile value below which it declines.
        min_access_for_no_decline: Access score below which it declines.
        growth_rate: Population gained per growing tick.
        decline_rate: Population lost per declining tick.
    """

    density_penalty: float
    growth_threshold: float
    min_desirability_for_growth: float
    decline_desirability_threshold: float
    min_access_for_no_decline: float
    growth_rate: int
    decline_rate: int


RULES: dict[ZoneCategory, CategoryRules] = {
    ZoneCategory.RESIDENTIAL: CategoryRules(
        density_penalty=C.R_DENSITY_PENALTY_FACTOR,
        growth_threshold=C.R_GROWTH_THRESHOLD,
        min_desirability_for_growth=C.R_MIN_DESIRABILITY_FOR_GROWTH,
        decline_desirability_threshold=C.R_DECLINE_DESIRABILITY_THRESHOLD,
        min_access_for_no_decline=C.R_MIN_JOB_SCORE_FOR_NO_DECLINE,
        growth_rate=C.R_GROWTH_POPULATION_RATE,
        decline_rate=C.R_DECLINE_POPULATION_RATE,
    ),
    ZoneCategory.COMMERCIAL: CategoryRules(
        density_penalty=C.C_DENSITY_PENALTY_FACTOR,
        growth_threshold=C.C_GROWTH_THRESHOLD,
        min_desirability_for_growth=C.C_MIN_DESIRABILITY_FOR_GROWTH,
        decline_desirability_threshold=C.C_DECLINE_DESIRABILITY_THRESHOLD,
        min_access_for_no_decline=C.C_MIN_CUSTOMER_SCORE_FOR_NO_DECLINE,
        growth_rate=C.C_GROWTH_POPULATION_RATE,
        decline_rate=C.C_DECLINE_POPULATION_RATE,
    ),
    ZoneCategory.INDUSTRIAL: CategoryRules(
        density_penalty=C.I_DENSITY_PENALTY_FACTOR,
        growth_threshold=C.I_GROWTH_THRESHOLD,
        min_desirability_for_growth=C.I_MIN_DESIRABILITY_FOR_GROWTH,
        decline_desirability_threshold=C.I_DECLINE_DESIRABILITY_THRESHOLD,
        min_access_for_no_decline=C.I_MIN_WORKER_SCORE_FOR_NO_DECLINE,
        growth_rate=C.I_GROWTH_POPULATION_RATE,
        decline_rate=C.I_DECLINE_POPULATION_RATE,
    ),
}


@dataclass
class ZoneLifecycle:
    """Per-tile state machine for zones and RCI buildings.

    Attributes:
        grid: The city grid.
        fields: Field simulator providing snapshots for developed tiles.
        scheduler: Timer service for zone development.
        rng: Seeded random generator for development delays.
        delay_min: Shortest development delay in seconds.
        delay_max: Longest development delay in seconds.
    """

    grid: GridStore
    fields: FieldSimulator
    scheduler: Scheduler
    rng: Generator
    delay_min: float = 5.0
    delay_max: float = 10.0

    # -- Road access ---------------------------------------------------------

    def refresh_road_access(self) -> list[tuple[int, int]]:
        """Refresh road flags and revert buildings that lost their road.

        Returns:
            Coordinates of buildings reverted to their zone.
        """
        reverted: list[tuple[int, int]] = []
        for x, y in self.grid.refresh_road_access():
            cell = self.grid.cells[y][x]
            if cell.type.is_building and cell.type.base_tile is not None:
                zone = get_tile_type(cell.type.base_tile)
                logger.debug(
                    "(%d, %d) lost road access: %s -> %s",
                    x,
                    y,
                    cell.type.id,
                    zone.id,
                )
                self.grid.set_tile_type(x, y, zone)
                reverted.append((x, y))
        return reverted

    # -- Timed development ---------------------------------------------------

    def attempt_zone_development(self, x: int, y: int) -> bool:
        """Schedule development of an empty zone.

        Args:
            x: Column index.
            y: Row index.

        Returns:
            True if a timer was scheduled; False when the cell is not an
            empty zone or already has a pending timer.
        """
        cell = self.grid.get_tile(x, y)
        if cell is None or not cell.type.is_developable_zone:
            return False
        if cell.pending_development is not None:
            return False
        delay = float(self.rng.uniform(self.delay_min, self.delay_max))
        zone_id = cell.type.id

        def fire() -> None:
            self._on_development_timer(x, y, zone_id, handle)

        handle = self.scheduler.schedule(delay, fire)
        cell.pending_development = handle
        return True

    def _on_development_timer(
        self,
        x: int,
        y: int,
        zone_id: str,
        handle: int,
    ) -> None:
        cell = self.grid.get_tile(x, y)
        # Bulldozed, replaced or rescheduled while waiting
        if cell is None or cell.type.id != zone_id:
            return
        if cell.pending_development != handle:
            return
        cell.pending_development = None
        if not self.grid.has_road_access(x, y) or cell.type.develops_into is None:
            logger.debug("Zone at (%d, %d) has no road; not developing", x, y)
            return

        building = get_tile_type(cell.type.develops_into)
        self.grid.set_tile_type(x, y, building)
        cell.population = building.population_capacity // 2
        cell.has_road_access = True
        pollution = self.fields.pollution_at(x, y)
        tile_value = self.fields.tile_value_at(x, y)
        if pollution is not None and tile_value is not None:
            cell.pollution = pollution
            cell.tile_value = tile_value
        logger.debug("Zone at (%d, %d) developed into %s", x, y, building.id)

    # -- Per-tick growth/decline -----------------------------------------------

    def update(self) -> None:
        """Run growth, decline and struggle tracking for every building."""
        for cell in self.grid.iter_cells():
            if cell.type.is_building and cell.type.zone_category is not None:
                self.process_building(cell)

    def process_building(self, cell: GridCell) -> None:
        """Advance one building by a tick."""
        category = cell.type.zone_category
        if category is None:
            return
        rules = RULES[category]
        desirability = cell.tile_value
        grow = False
        decline = False

        if not cell.has_road_access:
            decline = True
        else:
            primary, total = self.access_scores(cell)
            growth_factor = (
                desirability + total - cell.population * rules.density_penalty
            )
            grow = (
                growth_factor > rules.growth_threshold
                and desirability >= rules.min_desirability_for_growth
            )
            decline = (
                desirability < rules.decline_desirability_threshold
                or primary < rules.min_access_for_no_decline
            )

        if grow and not decline:
            self._grow(cell, rules)
        elif decline:
            self._decline(cell, rules)
        self._track_struggle(cell)

    def access_scores(self, cell: GridCell) -> tuple[float, float]:
        """Return ``(primary, total)`` access scores for a building.

        The primary score decides decline: jobs for residential, customers
        for commercial, workers for industrial.  The total feeds the
        growth factor.
        """
        pops = self.reachable_population(cell, C.CONNECTIVITY_RADIUS)
        residential = pops[ZoneCategory.RESIDENTIAL]
        commercial = pops[ZoneCategory.COMMERCIAL]
        industrial = pops[ZoneCategory.INDUSTRIAL]

        category = cell.type.zone_category
        if category is ZoneCategory.RESIDENTIAL:
            jobs = float(commercial + industrial)
            return jobs, jobs
        if category is ZoneCategory.COMMERCIAL:
            return float(residential), float(residential + industrial)
        market = C.INDUSTRIAL_MARKET_ACCESS_BONUS if commercial > 0 else 0.0
        return float(residential), residential + market

    def reachable_population(
        self,
        cell: GridCell,
        radius: int,
    ) -> dict[ZoneCategory, int]:
        """Sum building population per category within a square radius.

        Only buildings with road access count, and only when ``cell``
        itself has road access.
        """
        totals = dict.fromkeys(ZoneCategory, 0)
        if not cell.has_road_access:
            return totals
        for dy in range(-radius, radius + 1):
            for dx in range(-radius, radius + 1):
                if dx == 0 and dy == 0:
                    continue
                other = self.grid.get_tile(cell.x + dx, cell.y + dy)
                if other is None or not other.type.is_building:
                    continue
                if other.has_road_access and other.type.zone_category is not None:
                    totals[other.type.zone_category] += other.population
        return totals

    def _grow(self, cell: GridCell, rules: CategoryRules) -> None:
        capacity = cell.type.population_capacity
        grown = cell.population + rules.growth_rate
        if grown <= capacity:
            cell.population = grown
            return
        cell.population = capacity
        if cell.type.develops_into is not None:
            self._change_level(cell, get_tile_type(cell.type.develops_into))

    def _decline(self, cell: GridCell, rules: CategoryRules) -> None:
        shrunk = cell.population - rules.decline_rate
        if shrunk > 0:
            cell.population = shrunk
            return
        cell.population = 0
        if cell.type.reverts_to is not None:
            self._change_level(cell, get_tile_type(cell.type.reverts_to))

    def _change_level(self, cell: GridCell, new_type: TileTypeDefinition) -> None:
        population = cell.population
        old_level = cell.type.level
        logger.debug(
            "(%d, %d) %s -> %s",
            cell.x,
            cell.y,
            cell.type.id,
            new_type.id,
        )
        self.grid.set_tile_type(cell.x, cell.y, new_type)
        if not new_type.is_building:
            return
        upgraded = (
            old_level is not None
            and new_type.level is not None
            and new_type.level > old_level
        )
        if upgraded:
            # A new level starts a quarter full
            cell.population = new_type.population_capacity // 4
        else:
            cell.population = min(population, new_type.population_capacity)

    def _track_struggle(self, cell: GridCell) -> None:
        if not cell.type.is_building:
            return
        if cell.population_ratio < C.STRUGGLE_POPULATION_RATIO_THRESHOLD:
            cell.struggle_ticks += 1
            if cell.struggle_ticks >= C.STRUGGLE_VISUAL_THRESHOLD_TICKS:
                cell.is_visually_struggling = True
        else:
            cell.struggle_ticks = 0
            cell.is_visually_struggling = False
