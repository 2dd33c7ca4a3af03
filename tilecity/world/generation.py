"""Procedural map generation: elevation, river, mountains, parks, city hall.

Every feature is placed with bounded attempts.  A feature that cannot
find room is skipped; generation as a whole never fails.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

import numpy as np

from tilecity.catalog.tile_types import (
    CITY_HALL,
    GRASS_ID,
    MOUNTAIN,
    NATURAL_PARK,
    ROAD,
    WATER,
    WATER_ID,
)
from tilecity.fields.fields import type_mask
from tilecity.fields.land_value import shifted

if TYPE_CHECKING:
    from numpy.random import Generator

    from tilecity.world.grid import GridStore

logger = logging.getLogger(__name__)

# -- Generation parameters ----------------------------------------------------

_RIVER_EXTRA_LENGTH = 10
_RIVER_WIDE_CHANCE = 0.3
_RIVER_WIDEN_CHANCE = 0.15
_RIVER_DRIFT_CHANCE = 0.4

_MOUNTAIN_RANGES = (1, 2)
_MOUNTAIN_SIZE = (10, 24)
_MOUNTAIN_BORDER = 4
_MOUNTAIN_SEED_ATTEMPTS = 20
_MOUNTAIN_BRANCH_CHANCE = 0.6

_PARK_CLUSTERS = (5, 10)
_PARK_MAX_SIZE = 2
_PARK_WATER_RADIUS = 2
_PARK_WATERSIDE_ATTEMPTS = 25
_PARK_FALLBACK_ATTEMPTS = 15

# South, east, north, west: first grass neighbour gets the starter road
_ROAD_OFFSETS = ((0, 1), (1, 0), (0, -1), (-1, 0))


def generate_terrain(
    grid: GridStore,
    rng: Generator,
    max_elevation_level: int = 4,
) -> None:
    """Populate a grass grid with terrain height, natural features and a city hall.

    Args:
        grid: The grid to modify in place (expected to be all grass).
        rng: Seeded random generator.
        max_elevation_level: Highest elevation step of the ramp.
    """
    shape_elevation(grid, max_elevation_level)
    carve_river(grid, rng)
    raise_mountains(grid, rng)
    scatter_parks(grid, rng)
    place_city_hall(grid)


def shape_elevation(grid: GridStore, max_level: int) -> None:
    """Ramp elevation up towards the top-left corner, then smooth it once.

    The smoothing pass averages every land cell with its land
    4-neighbours, rounding half up.  Water stays at elevation 0.
    """
    ys, xs = np.mgrid[0 : grid.height, 0 : grid.width]
    rise_y = (grid.height - 1 - ys) / max(1, grid.height - 1)
    rise_x = (grid.width - 1 - xs) / max(1, grid.width - 1)
    ramp = np.floor((rise_y + rise_x) / 2 * max_level)
    land = ~type_mask(grid, lambda t: t.id == WATER_ID)
    ramp[~land] = 0.0

    total = ramp.copy()
    count = np.ones(ramp.shape, dtype=np.float64)
    for dx, dy in _ROAD_OFFSETS:
        neighbour_land = shifted(land, dx, dy)
        total += shifted(ramp, dx, dy) * neighbour_land
        count += neighbour_land
    smoothed = np.clip(np.floor(total / count + 0.5), 0, max_level)
    smoothed[~land] = 0.0

    for cell in grid.iter_cells():
        cell.elevation = int(smoothed[cell.y, cell.x])


def carve_river(grid: GridStore, rng: Generator) -> int:
    """Carve one river from the top row downward.

    The river drifts sideways with a lateral random walk.  It is two
    cells wide 30% of the time; a one-cell river widens incidentally.

    Returns:
        Number of water cells placed.
    """
    x = int(rng.integers(0, grid.width))
    length = grid.height + int(rng.integers(0, _RIVER_EXTRA_LENGTH))
    width = 2 if rng.random() < _RIVER_WIDE_CHANCE else 1
    placed = 0

    for y in range(min(length, grid.height)):
        for w in range(width):
            px = x + w
            if _make_water(grid, px, y):
                placed += 1
                if width == 1:
                    for side in (1, -1):
                        if rng.random() < _RIVER_WIDEN_CHANCE and _make_water(
                            grid, px + side, y,
                        ):
                            placed += 1
        if rng.random() < _RIVER_DRIFT_CHANCE:
            x += 1 if rng.random() < 0.5 else -1
            x = max(0, min(grid.width - width, x))
    return placed


def raise_mountains(grid: GridStore, rng: Generator) -> int:
    """Grow 1-2 mountain ranges by randomised flood fill.

    Returns:
        Number of mountain cells placed.
    """
    lo, hi = _MOUNTAIN_RANGES
    ranges = int(rng.integers(lo, hi + 1))
    placed = 0
    for _ in range(ranges):
        seed = _find_mountain_seed(grid, rng)
        if seed is None:
            logger.debug("No grass seed for a mountain range; skipping")
            continue
        size = int(rng.integers(_MOUNTAIN_SIZE[0], _MOUNTAIN_SIZE[1] + 1))
        placed += _grow_range(grid, rng, seed, size)
    return placed


def scatter_parks(grid: GridStore, rng: Generator) -> int:
    """Place 5-10 small natural-park clusters, preferably near water.

    Returns:
        Number of clusters placed.
    """
    lo, hi = _PARK_CLUSTERS
    clusters = int(rng.integers(lo, hi + 1))
    placed = 0
    for _ in range(clusters):
        w = int(rng.integers(1, _PARK_MAX_SIZE + 1))
        h = int(rng.integers(1, _PARK_MAX_SIZE + 1))
        spot = _find_park_spot(grid, rng, w, h, near_water=True)
        if spot is None:
            spot = _find_park_spot(grid, rng, w, h, near_water=False)
        if spot is None:
            logger.debug("No room for a %dx%d park cluster; skipping", w, h)
            continue
        sx, sy = spot
        for y in range(sy, sy + h):
            for x in range(sx, sx + w):
                grid.set_tile_type(x, y, NATURAL_PARK)
        placed += 1
    return placed


def place_city_hall(grid: GridStore) -> tuple[int, int] | None:
    """Place the city hall near the centre, plus one adjacent road.

    The centre cell is preferred; otherwise the nearest grass cell in
    growing square rings is used.

    Returns:
        The city-hall coordinates, or None if the grid has no grass.
    """
    if grid.city_hall is not None:
        return grid.city_hall
    cx, cy = grid.width // 2, grid.height // 2
    spot = _nearest_grass(grid, cx, cy)
    if spot is None:
        logger.debug("No grass cell available for the city hall")
        return None
    x, y = spot
    grid.set_tile_type(x, y, CITY_HALL)
    for dx, dy in _ROAD_OFFSETS:
        neighbour = grid.get_tile(x + dx, y + dy)
        if neighbour is not None and neighbour.type.id == GRASS_ID:
            grid.set_tile_type(x + dx, y + dy, ROAD)
            break
    return spot


def _make_water(grid: GridStore, x: int, y: int) -> bool:
    cell = grid.get_tile(x, y)
    if cell is None or cell.type.id == WATER_ID:
        return False
    return grid.set_tile_type(x, y, WATER)


def _find_mountain_seed(
    grid: GridStore,
    rng: Generator,
) -> tuple[int, int] | None:
    span_x = max(1, grid.width - 2 * _MOUNTAIN_BORDER)
    span_y = max(1, grid.height - 2 * _MOUNTAIN_BORDER)
    offset_x = _MOUNTAIN_BORDER if grid.width > 2 * _MOUNTAIN_BORDER else 0
    offset_y = _MOUNTAIN_BORDER if grid.height > 2 * _MOUNTAIN_BORDER else 0
    for _ in range(_MOUNTAIN_SEED_ATTEMPTS):
        x = int(rng.integers(0, span_x)) + offset_x
        y = int(rng.integers(0, span_y)) + offset_y
        cell = grid.get_tile(x, y)
        if cell is not None and cell.type.id == GRASS_ID:
            return x, y
    return None


def _grow_range(
    grid: GridStore,
    rng: Generator,
    seed: tuple[int, int],
    size: int,
) -> int:
    grid.set_tile_type(seed[0], seed[1], MOUNTAIN)
    count = 1
    queue: deque[tuple[int, int]] = deque([seed])
    while queue and count < size:
        x, y = queue.popleft()
        offsets = list(_ROAD_OFFSETS)
        rng.shuffle(offsets)
        for dx, dy in offsets:
            nx, ny = x + dx, y + dy
            cell = grid.get_tile(nx, ny)
            if cell is None or cell.type.id != GRASS_ID:
                continue
            if rng.random() < _MOUNTAIN_BRANCH_CHANCE:
                grid.set_tile_type(nx, ny, MOUNTAIN)
                count += 1
                queue.append((nx, ny))
                if count >= size:
                    break
    return count


def _find_park_spot(
    grid: GridStore,
    rng: Generator,
    w: int,
    h: int,
    *,
    near_water: bool,
) -> tuple[int, int] | None:
    attempts = _PARK_WATERSIDE_ATTEMPTS if near_water else _PARK_FALLBACK_ATTEMPTS
    for _ in range(attempts):
        x = int(rng.integers(0, max(1, grid.width - w + 1)))
        y = int(rng.integers(0, max(1, grid.height - h + 1)))
        if not grid.is_area_clear_for_feature(x, y, w, h, (GRASS_ID,)):
            continue
        if near_water and not grid.is_area_near_water(
            x, y, w, h, _PARK_WATER_RADIUS,
        ):
            continue
        return x, y
    return None


def _nearest_grass(grid: GridStore, cx: int, cy: int) -> tuple[int, int] | None:
    max_ring = max(grid.width, grid.height)
    for ring in range(max_ring):
        for dy in range(-ring, ring + 1):
            for dx in range(-ring, ring + 1):
                if max(abs(dx), abs(dy)) != ring:
                    continue
                cell = grid.get_tile(cx + dx, cy + dy)
                if cell is not None and cell.type.id == GRASS_ID:
                    return cx + dx, cy + dy
    return None
