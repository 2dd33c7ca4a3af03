"""GridStore — the spatial container for the city.

The GridStore owns the cells arranged in a 2D grid and provides the
tile-level primitives every other component builds on: soft-failing
lookups, type replacement with its field-inheritance rules, the single
city-hall guarantee, area checks used by terrain generation, and road
access flags.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from tilecity.catalog.tile_types import (
    CITY_HALL_ID,
    GRASS_ID,
    ROAD_ID,
    WATER_ID,
    TileTypeDefinition,
)
from tilecity.simulation.constants import BASE_TILE_VALUE
from tilecity.world.cell import GridCell

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tilecity.zones.scheduler import Scheduler

logger = logging.getLogger(__name__)

_CARDINAL = ((0, -1), (0, 1), (-1, 0), (1, 0))


@dataclass
class GridStore:
    """A 2D grid of city tiles.

    Attributes:
        width: Number of columns in the grid.
        height: Number of rows in the grid.
        scheduler: Timer service used to cancel pending zone development
            when a cell is replaced or cleared.
        cells: 2D list of GridCell objects indexed as ``cells[y][x]``.
        city_hall: Coordinates of the city hall, if one has been placed.
    """

    width: int
    height: int
    scheduler: Scheduler | None = None
    cells: list[list[GridCell]] = field(init=False, repr=False)
    city_hall: tuple[int, int] | None = field(init=False, default=None)

    def __post_init__(self) -> None:
        """Initialise the grid with grass cells."""
        self.reset_to_grass()

    def reset_to_grass(self) -> None:
        """Replace every cell with default grass and forget the city hall."""
        if hasattr(self, "cells"):
            for cell in self.iter_cells():
                self._cancel_pending(cell)
        self.cells = [
            [GridCell(x=x, y=y) for x in range(self.width)]
            for y in range(self.height)
        ]
        self.city_hall = None

    def in_bounds(self, x: int, y: int) -> bool:
        """Return True if ``(x, y)`` lies on the grid."""
        return 0 <= x < self.width and 0 <= y < self.height

    def get_tile(self, x: int, y: int) -> GridCell | None:
        """Return the cell at ``(x, y)``, or None when out of bounds."""
        if not self.in_bounds(x, y):
            return None
        return self.cells[y][x]

    def iter_cells(self) -> Iterator[GridCell]:
        """Iterate over all cells, row by row."""
        for row in self.cells:
            yield from row

    def neighbours(self, x: int, y: int) -> list[GridCell]:
        """Return the in-bounds 4-neighbours of ``(x, y)``."""
        result: list[GridCell] = []
        for dx, dy in _CARDINAL:
            nx, ny = x + dx, y + dy
            if self.in_bounds(nx, ny):
                result.append(self.cells[ny][nx])
        return result

    def set_tile_type(self, x: int, y: int, tile_type: TileTypeDefinition) -> bool:
        """Replace a cell's type and reset its dynamic state.

        Pollution and tile value carry over from the previous occupant
        unless the new type is grass or an obstacle, which start clean.
        Road access and elevation are carried over, except that water
        always sits at elevation 0.  Any pending development timer is
        cancelled.

        Args:
            x: Column index.
            y: Row index.
            tile_type: The new definition.

        Returns:
            True if the type was replaced; False when out of bounds, when
            the cell is the city hall, or when a second city hall was
            requested.
        """
        cell = self.get_tile(x, y)
        if cell is None:
            return False
        if cell.type.id == CITY_HALL_ID and tile_type.id != CITY_HALL_ID:
            return False
        if tile_type.id == CITY_HALL_ID and self.city_hall not in (None, (x, y)):
            logger.warning(
                "Refusing second city hall at (%d, %d); one exists at %s",
                x,
                y,
                self.city_hall,
            )
            return False

        self._cancel_pending(cell)
        keep_fields = not (tile_type.id == GRASS_ID or tile_type.is_obstacle)
        pollution = cell.pollution if keep_fields else 0.0
        tile_value = cell.tile_value if keep_fields else BASE_TILE_VALUE
        road_access = cell.has_road_access

        cell.type = tile_type
        cell.reset_dynamic_state()
        cell.pollution = pollution
        cell.tile_value = tile_value
        cell.has_road_access = road_access
        if tile_type.id == WATER_ID:
            cell.elevation = 0

        if tile_type.id == CITY_HALL_ID:
            self.city_hall = (x, y)
        return True

    def clear_tile_data(self, x: int, y: int) -> None:
        """Reset a cell's dynamic state to grass defaults, keeping its type.

        Elevation is kept.  Cancels any pending development timer.  The
        city-hall cell and out-of-bounds coordinates are left untouched.
        """
        cell = self.get_tile(x, y)
        if cell is None or cell.type.id == CITY_HALL_ID:
            return
        cell.reset_dynamic_state()
        self._cancel_pending(cell)

    def is_area_clear_for_feature(
        self,
        x: int,
        y: int,
        w: int,
        h: int,
        allowed_type_ids: tuple[str, ...] | list[str] = (GRASS_ID,),
    ) -> bool:
        """Check that a ``w`` x ``h`` rectangle can host a new feature.

        Returns:
            True iff every cell is in bounds, has an allowed type id, and
            is not an obstacle.
        """
        for cy in range(y, y + h):
            for cx in range(x, x + w):
                cell = self.get_tile(cx, cy)
                if cell is None:
                    return False
                if cell.type.id not in allowed_type_ids or cell.type.is_obstacle:
                    return False
        return True

    def is_area_near_water(
        self,
        x: int,
        y: int,
        w: int,
        h: int,
        radius: int,
    ) -> bool:
        """Return True if any water lies within ``radius`` of the rectangle."""
        for cy in range(max(0, y - radius), min(self.height, y + h + radius)):
            for cx in range(max(0, x - radius), min(self.width, x + w + radius)):
                if self.cells[cy][cx].type.id == WATER_ID:
                    return True
        return False

    def has_road_access(self, x: int, y: int) -> bool:
        """Return True iff a 4-neighbour of ``(x, y)`` is a road."""
        return any(n.type.id == ROAD_ID for n in self.neighbours(x, y))

    def refresh_road_access(self) -> list[tuple[int, int]]:
        """Recompute ``has_road_access`` for every cell.

        Returns:
            Coordinates of cells that had road access and lost it.
        """
        lost: list[tuple[int, int]] = []
        for cell in self.iter_cells():
            access = self.has_road_access(cell.x, cell.y)
            if cell.has_road_access and not access:
                lost.append((cell.x, cell.y))
            cell.has_road_access = access
        return lost

    def snapshot(self) -> list[list[GridCell]]:
        """Return a copy of every cell for read-only consumers."""
        return [[replace(cell) for cell in row] for row in self.cells]

    def count(self, tile_id: str) -> int:
        """Return how many cells currently have type ``tile_id``."""
        return sum(1 for cell in self.iter_cells() if cell.type.id == tile_id)

    def _cancel_pending(self, cell: GridCell) -> None:
        if cell.pending_development is None:
            return
        if self.scheduler is not None:
            self.scheduler.cancel(cell.pending_development)
        cell.pending_development = None
