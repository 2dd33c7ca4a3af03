"""Pollution emission, decay, spread and park reduction.

Operates on the raw NumPy array inside ``FieldLayers``.  Each stage is a
separate function so the per-tick order (emission, decay, spread, park
reduction, clamp) reads directly from ``update_pollution_system``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from tilecity.catalog.tile_types import MOUNTAIN_ID, WATER_ID, ZoneCategory
from tilecity.fields.fields import FieldLayers, type_mask
from tilecity.simulation.constants import (
    INDUSTRIAL_POLLUTION_TRANSFER_TO_WATER_FACTOR,
    MAX_POLLUTION,
    MOUNTAIN_POLLUTION_REFLECTION_FACTOR,
    PARK_POLLUTION_REDUCTION_AMOUNT,
    PARK_POLLUTION_REDUCTION_RADIUS,
    PARK_SPREAD_DAMPENING_FACTOR,
    POLLUTION_DECAY_FACTOR,
    POLLUTION_PER_INDUSTRIAL_POPULATION_UNIT,
    POLLUTION_SPREAD_FACTOR,
    WATER_POLLUTION_AFFECTS_LAND_RADIUS,
    WATER_POLLUTION_DECAY_FACTOR,
    WATER_POLLUTION_SPREAD_FACTOR,
    WATER_POLLUTION_TO_LAND_FACTOR,
)

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from tilecity.world.grid import GridStore

# (destination, source) slice pairs for the four cardinal donations
_DIRECTIONS = (
    ((slice(1, None), slice(None)), (slice(None, -1), slice(None))),  # down
    ((slice(None, -1), slice(None)), (slice(1, None), slice(None))),  # up
    ((slice(None), slice(1, None)), (slice(None), slice(None, -1))),  # right
    ((slice(None), slice(None, -1)), (slice(None), slice(1, None))),  # left
)


def emit_industrial(fields: FieldLayers, grid: GridStore) -> None:
    """Add pollution from every populated industrial building.

    Each building adds ``population * POLLUTION_PER_INDUSTRIAL_POPULATION_UNIT``
    to its own cell and a fraction of that to each adjacent water cell.
    """
    for cell in grid.iter_cells():
        kind = cell.type
        if not kind.is_building or kind.zone_category is not ZoneCategory.INDUSTRIAL:
            continue
        amount = cell.population * POLLUTION_PER_INDUSTRIAL_POPULATION_UNIT
        if amount <= 0:
            continue
        fields.deposit_pollution(cell.x, cell.y, amount)
        for neighbour in grid.neighbours(cell.x, cell.y):
            if neighbour.type.id == WATER_ID:
                fields.deposit_pollution(
                    neighbour.x,
                    neighbour.y,
                    amount * INDUSTRIAL_POLLUTION_TRANSFER_TO_WATER_FACTOR,
                )


def decay(fields: FieldLayers, water: NDArray[np.bool_]) -> None:
    """Multiply land and water pollution by their decay factors in place."""
    fields.pollution *= np.where(
        water,
        WATER_POLLUTION_DECAY_FACTOR,
        POLLUTION_DECAY_FACTOR,
    )


def spread(
    fields: FieldLayers,
    water: NDArray[np.bool_],
    mountains: NDArray[np.bool_],
) -> None:
    """Diffuse pollution to the four cardinal neighbours.

    Each cell donates its spread fraction, split equally between its four
    neighbours; shares that would leave the grid are lost.  A mountain
    bounces ``MOUNTAIN_POLLUTION_REFLECTION_FACTOR`` of what it receives
    back to the donor.
    """
    grid = fields.pollution
    rate = np.where(water, WATER_POLLUTION_SPREAD_FACTOR, POLLUTION_SPREAD_FACTOR)
    donated = grid * rate
    grid -= donated  # keep the non-donated portion

    share = donated / 4.0
    reflect = mountains * MOUNTAIN_POLLUTION_REFLECTION_FACTOR
    for dst, src in _DIRECTIONS:
        incoming = share[src]
        bounced = incoming * reflect[dst]
        grid[dst] += incoming - bounced
        grid[src] += bounced


def leak_water_to_land(fields: FieldLayers, water: NDArray[np.bool_]) -> None:
    """Move a fraction of each water cell's pollution onto nearby land.

    Land cells within ``WATER_POLLUTION_AFFECTS_LAND_RADIUS`` (Manhattan)
    receive shares weighted by inverse distance.
    """
    radius = WATER_POLLUTION_AFFECTS_LAND_RADIUS
    source = fields.pollution.copy()
    height, width = source.shape
    for y, x in zip(*np.nonzero(water & (source > 0)), strict=True):
        targets: list[tuple[int, int, float]] = []
        for dy in range(-radius, radius + 1):
            for dx in range(-radius, radius + 1):
                dist = abs(dx) + abs(dy)
                nx, ny = x + dx, y + dy
                if dist == 0 or dist > radius:
                    continue
                if 0 <= nx < width and 0 <= ny < height and not water[ny, nx]:
                    targets.append((int(nx), int(ny), 1.0 / dist))
        if not targets:
            continue
        leaked = source[y, x] * WATER_POLLUTION_TO_LAND_FACTOR
        total_weight = sum(w for _, _, w in targets)
        fields.pollution[y, x] -= leaked
        for nx, ny, w in targets:
            fields.pollution[ny, nx] += leaked * w / total_weight


def reduce_near_parks(fields: FieldLayers, grid: GridStore) -> None:
    """Subtract park absorption from every non-obstacle cell in range.

    A park removes ``PARK_POLLUTION_REDUCTION_AMOUNT / (d + 1)``, dampened
    by ``PARK_SPREAD_DAMPENING_FACTOR ** d``, from each cell at Manhattan
    distance ``d`` up to ``PARK_POLLUTION_REDUCTION_RADIUS``, itself
    included.  Obstacles are never reduced.
    """
    radius = PARK_POLLUTION_REDUCTION_RADIUS
    for park in grid.iter_cells():
        if not park.type.is_park:
            continue
        for dy in range(-radius, radius + 1):
            for dx in range(-radius, radius + 1):
                dist = abs(dx) + abs(dy)
                if dist > radius:
                    continue
                target = grid.get_tile(park.x + dx, park.y + dy)
                if target is None or target.type.is_obstacle:
                    continue
                reduction = (
                    PARK_POLLUTION_REDUCTION_AMOUNT
                    / (dist + 1)
                    * PARK_SPREAD_DAMPENING_FACTOR**dist
                )
                fields.pollution[target.y, target.x] -= reduction


def clamp(fields: FieldLayers) -> None:
    """Clamp every pollution value to ``[0, MAX_POLLUTION]``."""
    np.clip(fields.pollution, 0.0, MAX_POLLUTION, out=fields.pollution)


def update_pollution_system(fields: FieldLayers, grid: GridStore) -> None:
    """Run one tick of the pollution model.

    Order: emission, decay, spread (with mountain reflection and water
    leakage), park reduction, clamp.

    Args:
        fields: The field layers to update in place.
        grid: The grid supplying tile types and populations.
    """
    water = type_mask(grid, lambda t: t.id == WATER_ID)
    mountains = type_mask(grid, lambda t: t.id == MOUNTAIN_ID)

    emit_industrial(fields, grid)
    decay(fields, water)
    spread(fields, water, mountains)
    leak_water_to_land(fields, water)
    reduce_near_parks(fields, grid)
    clamp(fields)
