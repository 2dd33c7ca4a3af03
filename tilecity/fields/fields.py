"""FieldLayers — the pollution and land-value scalar fields.

Each field is stored as a separate NumPy 2D array with the same shape as
the grid.  The layers persist across ticks; ``pollution.py`` and
``land_value.py`` evolve them in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from tilecity.simulation.constants import BASE_TILE_VALUE

if TYPE_CHECKING:
    from collections.abc import Callable

    from tilecity.catalog.tile_types import TileTypeDefinition
    from tilecity.world.grid import GridStore


@dataclass
class FieldLayers:
    """Pollution and land-value grids for a city.

    Attributes:
        width: Grid columns (must match GridStore).
        height: Grid rows (must match GridStore).
        pollution: Pollution concentration, indexed ``[y, x]``.
        land_value: Land value, indexed ``[y, x]``.
    """

    width: int
    height: int
    pollution: NDArray[np.float64] = field(init=False, repr=False)
    land_value: NDArray[np.float64] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Create zeroed pollution and baseline land value."""
        self.reset()

    def reset(self) -> None:
        """Zero pollution and restore the baseline land value everywhere."""
        shape = (self.height, self.width)
        self.pollution = np.zeros(shape, dtype=np.float64)
        self.land_value = np.full(shape, BASE_TILE_VALUE, dtype=np.float64)

    def in_bounds(self, x: int, y: int) -> bool:
        """Return True if ``(x, y)`` lies on the field."""
        return 0 <= x < self.width and 0 <= y < self.height

    def pollution_at(self, x: int, y: int) -> float | None:
        """Read pollution at a cell, or None when out of bounds."""
        if not self.in_bounds(x, y):
            return None
        return float(self.pollution[y, x])

    def land_value_at(self, x: int, y: int) -> float | None:
        """Read land value at a cell, or None when out of bounds."""
        if not self.in_bounds(x, y):
            return None
        return float(self.land_value[y, x])

    def deposit_pollution(self, x: int, y: int, amount: float) -> None:
        """Add pollution at a specific cell.

        Args:
            x: Column index.
            y: Row index.
            amount: Quantity to add.
        """
        self.pollution[y, x] += amount


def type_mask(
    grid: GridStore,
    predicate: Callable[[TileTypeDefinition], bool],
) -> NDArray[np.bool_]:
    """Return a boolean ``[y, x]`` mask of cells whose type matches.

    Args:
        grid: The grid to scan.
        predicate: Test applied to each cell's tile type.
    """
    mask = np.zeros((grid.height, grid.width), dtype=np.bool_)
    for cell in grid.iter_cells():
        if predicate(cell.type):
            mask[cell.y, cell.x] = True
    return mask
