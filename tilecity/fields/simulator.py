"""FieldSimulator — advances pollution and land value once per tick.

Owns the ``FieldLayers`` and copies the results back onto the grid cells
so every consumer of a cell sees the same snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tilecity.fields.fields import FieldLayers
from tilecity.fields.land_value import update_land_values
from tilecity.fields.pollution import update_pollution_system

if TYPE_CHECKING:
    from tilecity.world.grid import GridStore


@dataclass
class FieldSimulator:
    """Persistent pollution and land-value fields for one grid.

    Attributes:
        width: Grid columns.
        height: Grid rows.
        fields: The underlying NumPy layers.
    """

    width: int
    height: int
    fields: FieldLayers = field(init=False)

    def __post_init__(self) -> None:
        self.fields = FieldLayers(width=self.width, height=self.height)

    def step(self, grid: GridStore) -> None:
        """Advance pollution, recompute land value, then snapshot onto cells."""
        update_pollution_system(self.fields, grid)
        update_land_values(self.fields, grid)
        self.write_snapshots(grid)

    def write_snapshots(self, grid: GridStore) -> None:
        """Copy field values onto every cell's pollution/tile_value."""
        pollution = self.fields.pollution
        land_value = self.fields.land_value
        for cell in grid.iter_cells():
            cell.pollution = float(pollution[cell.y, cell.x])
            cell.tile_value = float(land_value[cell.y, cell.x])

    def reset(self) -> None:
        """Zero pollution and restore baseline land value."""
        self.fields.reset()

    def pollution_at(self, x: int, y: int) -> float | None:
        """Return pollution at ``(x, y)``, or None out of bounds."""
        return self.fields.pollution_at(x, y)

    def tile_value_at(self, x: int, y: int) -> float | None:
        """Return land value at ``(x, y)``, or None out of bounds."""
        return self.fields.land_value_at(x, y)
