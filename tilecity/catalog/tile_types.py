"""Tile catalog — the immutable registry of tile-type definitions.

Every cell in the grid holds a reference to one of these definitions.
Definitions are frozen and interned by key, so identity comparison and
O(1) lookup are both safe.  Developed RCI levels are generated from a
per-category formula rather than written out by hand.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

MAX_ZONE_LEVEL = 3


class ZoneCategory(Enum):
    """The three RCI land-use categories."""

    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    INDUSTRIAL = "industrial"


@dataclass(frozen=True)
class TileTypeDefinition:
    """A single tile type.

    Attributes:
        key: Catalog key (e.g. ``RESIDENTIAL_L1``).
        id: Lower-case identifier used by commands (e.g. ``residential_l1``).
        name: Human-readable name.
        color: Render colour as a hex string.
        render_height: Relative render height for collaborators that draw.
        cost: Build price, or None for developed levels.
        carry_cost: Upkeep charged every tick.
        tax_rate_per_population: Tax collected per population unit.
        population_capacity: Maximum population the tile can hold.
        jobs_provided: Jobs offered to the city workforce.
        is_zone: True for zone parcels (developed or not).
        is_developable_zone: True for empty zones awaiting development.
        is_building: True for developed RCI levels.
        is_obstacle: Cannot be built on or bulldozed.
        is_nature: Water, parks and mountains.
        zone_category: RCI category, if any.
        level: Building level (1..3), buildings only.
        develops_into: Catalog key of the next level.
        reverts_to: Catalog key of the previous level (or the zone).
        base_tile: Catalog key of the originating zone.
    """

    key: str
    id: str
    name: str
    color: str
    render_height: float = 0.0
    cost: float | None = 0
    carry_cost: float = 0.0
    tax_rate_per_population: float = 0.0
    population_capacity: int = 0
    jobs_provided: int = 0
    is_zone: bool = False
    is_developable_zone: bool = False
    is_building: bool = False
    is_obstacle: bool = False
    is_nature: bool = False
    zone_category: ZoneCategory | None = None
    level: int | None = None
    develops_into: str | None = None
    reverts_to: str | None = None
    base_tile: str | None = None

    @property
    def is_park(self) -> bool:
        """Return True for player-built and natural parks."""
        return self.id in (PARK_ID, NATURAL_PARK_ID)


GRASS_ID = "grass"
ROAD_ID = "road"
WATER_ID = "water"
PARK_ID = "park"
NATURAL_PARK_ID = "natural_park"
MOUNTAIN_ID = "mountain"
CITY_HALL_ID = "city_hall"


# (capacity, jobs, tax, upkeep) per level for each category
def _level_stats(
    category: ZoneCategory,
    level: int,
) -> tuple[int, int, float, float]:
    if category is ZoneCategory.RESIDENTIAL:
        return level * 10, 0, 0.5 + level * 0.2, 2 + level * 1.5
    if category is ZoneCategory.COMMERCIAL:
        return level * 5, level * 6, 0.8 + level * 0.3, 3 + level * 2.0
    return level * 8, level * 12, 0.5 + level * 0.25, 4 + level * 2.0


def _building(
    category: ZoneCategory,
    level: int,
    name: str,
    color: str,
    render_height: float,
) -> TileTypeDefinition:
    prefix = category.name
    capacity, jobs, tax, upkeep = _level_stats(category, level)
    return TileTypeDefinition(
        key=f"{prefix}_L{level}",
        id=f"{category.value}_l{level}",
        name=name,
        color=color,
        render_height=render_height,
        cost=None,
        carry_cost=upkeep,
        tax_rate_per_population=tax,
        population_capacity=capacity,
        jobs_provided=jobs,
        is_building=True,
        zone_category=category,
        level=level,
        develops_into=f"{prefix}_L{level + 1}" if level < MAX_ZONE_LEVEL else None,
        reverts_to=f"{prefix}_L{level - 1}" if level > 1 else f"{prefix}_ZONE",
        base_tile=f"{prefix}_ZONE",
    )


def _zone(
    category: ZoneCategory,
    name: str,
    color: str,
    cost: float,
) -> TileTypeDefinition:
    prefix = category.name
    return TileTypeDefinition(
        key=f"{prefix}_ZONE",
        id=f"{category.value}_zone",
        name=name,
        color=color,
        render_height=0.05,
        cost=cost,
        carry_cost=0.2,
        is_zone=True,
        is_developable_zone=True,
        zone_category=category,
        develops_into=f"{prefix}_L1",
        base_tile=f"{prefix}_ZONE",
    )


_R = ZoneCategory.RESIDENTIAL
_C = ZoneCategory.COMMERCIAL
_I = ZoneCategory.INDUSTRIAL

_DEFINITIONS: tuple[TileTypeDefinition, ...] = (
    TileTypeDefinition("GRASS", GRASS_ID, "Grass", "#72a372"),
    TileTypeDefinition(
        "ROAD", ROAD_ID, "Road", "#4a5568",
        render_height=0.01, cost=10, carry_cost=0.5,
    ),
    TileTypeDefinition(
        "WATER", WATER_ID, "Water", "#63b3ed",
        render_height=0.02, cost=5, is_nature=True,
    ),
    TileTypeDefinition(
        "PARK", PARK_ID, "Park", "#38a169",
        render_height=0.15, cost=20, carry_cost=2, is_nature=True,
    ),
    TileTypeDefinition(
        "NATURAL_PARK", NATURAL_PARK_ID, "Natural Park", "#2e7d32",
        render_height=0.15, is_nature=True,
    ),
    TileTypeDefinition(
        "MOUNTAIN", MOUNTAIN_ID, "Mountain", "#504a4b",
        render_height=0.8, is_nature=True, is_obstacle=True,
    ),
    TileTypeDefinition(
        "CITY_HALL", CITY_HALL_ID, "City Hall", "#ffd700",
        render_height=0.7, is_obstacle=True,
    ),
    _zone(_R, "Residential Zone", "#f6ad55", 20),
    _zone(_C, "Commercial Zone", "#9b59b6", 30),
    _zone(_I, "Industrial Zone", "#a0aec0", 25),
    _building(_R, 1, "Small House", "#e99c40", 0.4),
    _building(_R, 2, "Medium House", "#f0b863", 0.6),
    _building(_R, 3, "Apartment", "#f5d48f", 0.8),
    _building(_C, 1, "Small Shop", "#9b59b6", 0.5),
    _building(_C, 2, "Medium Store", "#b679d1", 0.7),
    _building(_C, 3, "Office Building", "#d19ee6", 0.9),
    _building(_I, 1, "Small Factory", "#8c9bab", 0.45),
    _building(_I, 2, "Medium Factory", "#a7b8c8", 0.65),
    _building(_I, 3, "Large Factory", "#c2d0dd", 0.85),
)

TILE_TYPES: Mapping[str, TileTypeDefinition] = MappingProxyType(
    {d.key: d for d in _DEFINITIONS},
)
_BY_ID: Mapping[str, TileTypeDefinition] = MappingProxyType(
    {d.id: d for d in _DEFINITIONS},
)


def get_tile_type(key: str) -> TileTypeDefinition:
    """Return the definition registered under ``key``.

    Raises:
        KeyError: If no such key exists.
    """
    return TILE_TYPES[key]


def find_by_id(tile_id: str) -> TileTypeDefinition | None:
    """Look up a definition by its id or its catalog key.

    Returns:
        The definition, or None if neither matches.
    """
    found = _BY_ID.get(tile_id)
    if found is None:
        found = TILE_TYPES.get(tile_id)
    return found


def all_tile_types() -> Iterator[TileTypeDefinition]:
    """Iterate over every definition in catalog order."""
    return iter(_DEFINITIONS)


def levels_for(category: ZoneCategory) -> list[TileTypeDefinition]:
    """Return the developed levels of a category, lowest first."""
    return sorted(
        (d for d in _DEFINITIONS if d.is_building and d.zone_category is category),
        key=lambda d: d.level or 0,
    )


GRASS = TILE_TYPES["GRASS"]
ROAD = TILE_TYPES["ROAD"]
WATER = TILE_TYPES["WATER"]
PARK = TILE_TYPES["PARK"]
NATURAL_PARK = TILE_TYPES["NATURAL_PARK"]
MOUNTAIN = TILE_TYPES["MOUNTAIN"]
CITY_HALL = TILE_TYPES["CITY_HALL"]
