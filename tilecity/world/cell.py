"""GridCell — a single tile in the city grid.

Each cell references an immutable tile-type definition from the catalog
and carries the dynamic state the simulation evolves: population, the
pollution and land-value snapshots, road access, and struggle tracking.
The authoritative pollution and land-value fields live in
``FieldLayers``; the cell copies are refreshed after every tick.
"""

from __future__ import annotations

from dataclasses import dataclass

from tilecity.catalog.tile_types import GRASS, TileTypeDefinition
from tilecity.simulation.constants import BASE_TILE_VALUE


@dataclass
class GridCell:
    """A single tile in the city grid.

    Attributes:
        x: Column position.
        y: Row position.
        type: Tile-type definition (shared, never copied).
        population: Residents or workers, at most the type's capacity.
        tile_value: Land-value snapshot (0..MAX_TILE_VALUE).
        pollution: Pollution snapshot (0..MAX_POLLUTION).
        has_road_access: True if a 4-neighbour is a road.
        struggle_ticks: Consecutive ticks spent below the struggle ratio.
        is_visually_struggling: Sticky struggle flag used for tax and display.
        pending_development: Scheduler handle of a pending zone-development
            timer, or None.
        elevation: Terrain height step (0 for water).  Kept across type
            changes and resets of the dynamic state.
    """

    x: int
    y: int
    type: TileTypeDefinition = GRASS
    population: int = 0
    tile_value: float = BASE_TILE_VALUE
    pollution: float = 0.0
    has_road_access: bool = False
    struggle_ticks: int = 0
    is_visually_struggling: bool = False
    pending_development: int | None = None
    elevation: int = 0

    @property
    def population_ratio(self) -> float:
        """Return population as a fraction of capacity (0 if no capacity)."""
        capacity = self.type.population_capacity
        if capacity <= 0:
            return 0.0
        return self.population / capacity

    def reset_dynamic_state(self) -> None:
        """Restore population, fields, access and struggle to grass defaults."""
        self.population = 0
        self.tile_value = BASE_TILE_VALUE
        self.pollution = 0.0
        self.has_road_access = False
        self.struggle_ticks = 0
        self.is_visually_struggling = False
