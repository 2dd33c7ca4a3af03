"""Land-value recomputation.

Land value is rebuilt from scratch every tick from the current tile
layout and the pollution field.  Proximity bonuses are computed by
shifting boolean type masks over the grid, the same blur-by-shifting
approach the pollution spread uses.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np

from tilecity.catalog.tile_types import MOUNTAIN_ID, ROAD_ID, WATER_ID, ZoneCategory
from tilecity.fields.fields import FieldLayers, type_mask
from tilecity.simulation.constants import (
    BASE_TILE_VALUE,
    C_NEAR_I_BONUS,
    INDUSTRIAL_SELF_POLLUTION_TO_TILE_VALUE_MULTIPLIER,
    MAX_TILE_VALUE,
    MOUNTAIN_INFLUENCE_RADIUS,
    MOUNTAIN_TILE_VALUE_BONUS,
    PARK_INFLUENCE_RADIUS,
    PARK_TILE_VALUE_BONUS,
    POLLUTION_TO_TILE_VALUE_MULTIPLIER,
    R_NEAR_C_BONUS,
    R_NEAR_I_PENALTY,
    ROAD_ADJACENCY_TILE_VALUE_BONUS,
    WATER_INFLUENCE_RADIUS,
    WATER_TILE_VALUE_BONUS,
)

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from tilecity.world.grid import GridStore

_CARDINAL = ((0, -1), (0, 1), (-1, 0), (1, 0))


def shifted(mask: NDArray, dx: int, dy: int) -> NDArray[np.float64]:
    """Return ``out`` with ``out[y, x] = mask[y + dy, x + dx]``.

    Positions that would read outside the grid are zero.
    """
    out = np.zeros(mask.shape, dtype=np.float64)
    h, w = mask.shape
    dst_y = slice(max(0, -dy), min(h, h - dy))
    src_y = slice(max(0, dy), min(h, h + dy))
    dst_x = slice(max(0, -dx), min(w, w - dx))
    src_x = slice(max(0, dx), min(w, w + dx))
    if dst_y.start >= dst_y.stop or dst_x.start >= dst_x.stop:
        return out
    out[dst_y, dst_x] = mask[src_y, src_x]
    return out


def proximity_bonus(
    mask: NDArray[np.bool_],
    bonus: float,
    radius: int,
) -> NDArray[np.float64]:
    """Sum a linearly falling-off bonus from every masked cell in range.

    A masked cell at Euclidean distance ``d <= radius`` contributes
    ``bonus * (1 - d / (radius + 1))``.
    """
    total = np.zeros(mask.shape, dtype=np.float64)
    for dy in range(-radius, radius + 1):
        for dx in range(-radius, radius + 1):
            dist = math.hypot(dx, dy)
            if dist > radius:
                continue
            total += bonus * (1.0 - dist / (radius + 1)) * shifted(mask, dx, dy)
    return total


def adjacent_count(mask: NDArray[np.bool_]) -> NDArray[np.float64]:
    """Count masked 4-neighbours of every cell."""
    total = np.zeros(mask.shape, dtype=np.float64)
    for dx, dy in _CARDINAL:
        total += shifted(mask, dx, dy)
    return total


def update_land_values(fields: FieldLayers, grid: GridStore) -> None:
    """Recompute the land-value field from terrain, zoning and pollution.

    Args:
        fields: The field layers; ``land_value`` is overwritten.
        grid: The grid supplying tile types.
    """
    water = type_mask(grid, lambda t: t.id == WATER_ID)
    parks = type_mask(grid, lambda t: t.is_park)
    mountains = type_mask(grid, lambda t: t.id == MOUNTAIN_ID)
    roads = type_mask(grid, lambda t: t.id == ROAD_ID)
    residential = type_mask(
        grid, lambda t: t.zone_category is ZoneCategory.RESIDENTIAL,
    )
    commercial = type_mask(
        grid, lambda t: t.zone_category is ZoneCategory.COMMERCIAL,
    )
    industrial = type_mask(
        grid, lambda t: t.zone_category is ZoneCategory.INDUSTRIAL,
    )
    industrial_buildings = type_mask(
        grid,
        lambda t: t.is_building and t.zone_category is ZoneCategory.INDUSTRIAL,
    )

    value = np.full(water.shape, BASE_TILE_VALUE, dtype=np.float64)
    value += proximity_bonus(water, WATER_TILE_VALUE_BONUS, WATER_INFLUENCE_RADIUS)
    value += proximity_bonus(parks, PARK_TILE_VALUE_BONUS, PARK_INFLUENCE_RADIUS)
    value += proximity_bonus(
        mountains,
        MOUNTAIN_TILE_VALUE_BONUS,
        MOUNTAIN_INFLUENCE_RADIUS,
    )
    value += ROAD_ADJACENCY_TILE_VALUE_BONUS * (adjacent_count(roads) > 0)

    near_commercial = adjacent_count(commercial)
    near_industrial = adjacent_count(industrial)
    value += residential * (
        R_NEAR_C_BONUS * near_commercial + R_NEAR_I_PENALTY * near_industrial
    )
    value += commercial * (C_NEAR_I_BONUS * near_industrial)

    multiplier = np.where(
        industrial_buildings,
        INDUSTRIAL_SELF_POLLUTION_TO_TILE_VALUE_MULTIPLIER,
        POLLUTION_TO_TILE_VALUE_MULTIPLIER,
    )
    value -= multiplier * fields.pollution

    np.clip(value, 0.0, MAX_TILE_VALUE, out=value)
    fields.land_value = value
