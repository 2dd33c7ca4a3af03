"""Tests for tilecity.world — grid storage, tile replacement, generation."""

import numpy as np

from tilecity.catalog.tile_types import (
    CITY_HALL,
    CITY_HALL_ID,
    GRASS,
    GRASS_ID,
    MOUNTAIN,
    NATURAL_PARK_ID,
    ROAD,
    ROAD_ID,
    WATER,
    WATER_ID,
    get_tile_type,
)
from tilecity.simulation.constants import BASE_TILE_VALUE
from tilecity.world.generation import (
    generate_terrain,
    place_city_hall,
    shape_elevation,
)
from tilecity.world.grid import GridStore
from tilecity.zones.scheduler import VirtualScheduler


class TestGridStore:
    """Tests for creation and lookups."""

    def test_dimensions(self, small_grid: GridStore) -> None:
        assert len(small_grid.cells) == 8
        assert len(small_grid.cells[0]) == 8

    def test_starts_as_grass(self, small_grid: GridStore) -> None:
        for cell in small_grid.iter_cells():
            assert cell.type is GRASS
            assert cell.tile_value == BASE_TILE_VALUE
            assert cell.pollution == 0.0

    def test_cell_coordinates(self, small_grid: GridStore) -> None:
        cell = small_grid.get_tile(3, 5)
        assert cell is not None
        assert (cell.x, cell.y) == (3, 5)

    def test_out_of_bounds_returns_none(self, small_grid: GridStore) -> None:
        assert small_grid.get_tile(-1, 0) is None
        assert small_grid.get_tile(0, 8) is None

    def test_neighbours_at_corner(self, small_grid: GridStore) -> None:
        assert len(small_grid.neighbours(0, 0)) == 2
        assert len(small_grid.neighbours(4, 4)) == 4

    def test_snapshot_is_detached(self, small_grid: GridStore) -> None:
        snap = small_grid.snapshot()
        snap[0][0].population = 99
        assert small_grid.get_tile(0, 0).population == 0


class TestSetTileType:
    """Tests for type replacement rules."""

    def test_replaces_type(self, small_grid: GridStore) -> None:
        assert small_grid.set_tile_type(2, 2, ROAD)
        assert small_grid.get_tile(2, 2).type is ROAD

    def test_out_of_bounds_is_refused(self, small_grid: GridStore) -> None:
        assert not small_grid.set_tile_type(20, 2, ROAD)

    def test_resets_population(self, small_grid: GridStore) -> None:
        small_grid.set_tile_type(1, 1, get_tile_type("RESIDENTIAL_L1"))
        small_grid.get_tile(1, 1).population = 5
        small_grid.set_tile_type(1, 1, get_tile_type("RESIDENTIAL_L2"))
        assert small_grid.get_tile(1, 1).population == 0

    def test_keeps_fields_for_non_grass(self, small_grid: GridStore) -> None:
        cell = small_grid.get_tile(1, 1)
        cell.pollution = 12.0
        cell.tile_value = 80.0
        small_grid.set_tile_type(1, 1, ROAD)
        assert cell.pollution == 12.0
        assert cell.tile_value == 80.0

    def test_grass_starts_clean(self, small_grid: GridStore) -> None:
        small_grid.set_tile_type(1, 1, ROAD)
        cell = small_grid.get_tile(1, 1)
        cell.pollution = 12.0
        cell.tile_value = 80.0
        small_grid.set_tile_type(1, 1, GRASS)
        assert cell.pollution == 0.0
        assert cell.tile_value == BASE_TILE_VALUE

    def test_obstacle_starts_clean(self, small_grid: GridStore) -> None:
        cell = small_grid.get_tile(1, 1)
        cell.pollution = 12.0
        small_grid.set_tile_type(1, 1, MOUNTAIN)
        assert cell.pollution == 0.0

    def test_city_hall_cannot_be_overwritten(self, small_grid: GridStore) -> None:
        assert small_grid.set_tile_type(4, 4, CITY_HALL)
        assert not small_grid.set_tile_type(4, 4, ROAD)
        assert small_grid.get_tile(4, 4).type is CITY_HALL

    def test_only_one_city_hall(self, small_grid: GridStore) -> None:
        assert small_grid.set_tile_type(4, 4, CITY_HALL)
        assert not small_grid.set_tile_type(1, 1, CITY_HALL)
        assert small_grid.count(CITY_HALL_ID) == 1
        assert small_grid.city_hall == (4, 4)

    def test_replacing_cancels_timer(
        self,
        small_grid: GridStore,
        scheduler: VirtualScheduler,
    ) -> None:
        cell = small_grid.get_tile(2, 2)
        cell.pending_development = scheduler.schedule(5.0, lambda: None)
        small_grid.set_tile_type(2, 2, ROAD)
        assert cell.pending_development is None
        assert scheduler.pending() == []


class TestClearTileData:
    """Tests for clearing dynamic state."""

    def test_clears_state_keeps_type(self, small_grid: GridStore) -> None:
        small_grid.set_tile_type(3, 3, get_tile_type("INDUSTRIAL_L1"))
        cell = small_grid.get_tile(3, 3)
        cell.population = 4
        cell.pollution = 30.0
        small_grid.clear_tile_data(3, 3)
        assert cell.type.id == "industrial_l1"
        assert cell.population == 0
        assert cell.pollution == 0.0

    def test_city_hall_untouched(self, small_grid: GridStore) -> None:
        small_grid.set_tile_type(3, 3, CITY_HALL)
        cell = small_grid.get_tile(3, 3)
        cell.tile_value = 99.0
        small_grid.clear_tile_data(3, 3)
        assert cell.tile_value == 99.0

    def test_out_of_bounds_is_noop(self, small_grid: GridStore) -> None:
        small_grid.clear_tile_data(-5, 100)


class TestAreaChecks:
    """Tests for feature placement helpers."""

    def test_clear_area(self, small_grid: GridStore) -> None:
        assert small_grid.is_area_clear_for_feature(0, 0, 3, 3)

    def test_area_off_grid(self, small_grid: GridStore) -> None:
        assert not small_grid.is_area_clear_for_feature(7, 7, 2, 2)

    def test_area_with_disallowed_type(self, small_grid: GridStore) -> None:
        small_grid.set_tile_type(1, 1, ROAD)
        assert not small_grid.is_area_clear_for_feature(0, 0, 3, 3)
        assert small_grid.is_area_clear_for_feature(
            0, 0, 3, 3, allowed_type_ids=(GRASS_ID, ROAD_ID),
        )

    def test_obstacle_never_allowed(self, small_grid: GridStore) -> None:
        small_grid.set_tile_type(1, 1, MOUNTAIN)
        assert not small_grid.is_area_clear_for_feature(
            0, 0, 3, 3, allowed_type_ids=(GRASS_ID, "mountain"),
        )

    def test_near_water(self, small_grid: GridStore) -> None:
        small_grid.set_tile_type(0, 0, WATER)
        assert small_grid.is_area_near_water(2, 0, 1, 1, radius=2)
        assert not small_grid.is_area_near_water(5, 5, 1, 1, radius=2)


class TestRoadAccess:
    """Tests for road-access flags."""

    def test_adjacent_road_gives_access(self, small_grid: GridStore) -> None:
        small_grid.set_tile_type(3, 3, ROAD)
        assert small_grid.has_road_access(3, 4)
        assert not small_grid.has_road_access(4, 4)

    def test_refresh_reports_lost_access(self, small_grid: GridStore) -> None:
        small_grid.set_tile_type(3, 3, ROAD)
        small_grid.refresh_road_access()
        assert small_grid.get_tile(3, 4).has_road_access
        small_grid.set_tile_type(3, 3, GRASS)
        lost = small_grid.refresh_road_access()
        assert (3, 4) in lost
        assert not small_grid.get_tile(3, 4).has_road_access


class TestGeneration:
    """Tests for procedural terrain generation."""

    def test_reset_to_grass_is_idempotent(self, small_grid: GridStore) -> None:
        small_grid.set_tile_type(1, 1, CITY_HALL)
        small_grid.reset_to_grass()
        first = [[c.type.id for c in row] for row in small_grid.cells]
        small_grid.reset_to_grass()
        second = [[c.type.id for c in row] for row in small_grid.cells]
        assert first == second
        assert small_grid.city_hall is None
        assert small_grid.count(GRASS_ID) == 64

    def test_generation_places_one_city_hall(self) -> None:
        grid = GridStore(width=25, height=25)
        generate_terrain(grid, np.random.default_rng(3))
        assert grid.count(CITY_HALL_ID) == 1
        assert grid.count(WATER_ID) > 0

    def test_city_hall_has_road(self) -> None:
        grid = GridStore(width=25, height=25)
        generate_terrain(grid, np.random.default_rng(11))
        hx, hy = grid.city_hall
        assert any(n.type.id == ROAD_ID for n in grid.neighbours(hx, hy))

    def test_generation_is_deterministic(self) -> None:
        a = GridStore(width=25, height=25)
        b = GridStore(width=25, height=25)
        generate_terrain(a, np.random.default_rng(99))
        generate_terrain(b, np.random.default_rng(99))
        assert [[c.type.id for c in r] for r in a.cells] == [
            [c.type.id for c in r] for r in b.cells
        ]

    def test_generated_parks_are_natural(self) -> None:
        grid = GridStore(width=25, height=25)
        generate_terrain(grid, np.random.default_rng(5))
        assert grid.count("park") == 0
        for cell in grid.iter_cells():
            if cell.type.is_park:
                assert cell.type.id == NATURAL_PARK_ID

    def test_city_hall_prefers_centre(self, small_grid: GridStore) -> None:
        assert place_city_hall(small_grid) == (4, 4)
        # South neighbour gets the road first
        assert small_grid.get_tile(4, 5).type is ROAD

    def test_city_hall_skips_occupied_centre(self, small_grid: GridStore) -> None:
        small_grid.set_tile_type(4, 4, WATER)
        spot = place_city_hall(small_grid)
        assert spot is not None
        assert spot != (4, 4)
        assert max(abs(spot[0] - 4), abs(spot[1] - 4)) == 1


class TestElevation:
    """Tests for terrain height and its survival across replacements."""

    def test_ramp_rises_towards_origin(self, small_grid: GridStore) -> None:
        shape_elevation(small_grid, max_level=4)
        assert small_grid.get_tile(0, 0).elevation == 3
        assert small_grid.get_tile(7, 7).elevation == 0
        for cell in small_grid.iter_cells():
            assert 0 <= cell.elevation <= 4

    def test_water_stays_flat(self, small_grid: GridStore) -> None:
        small_grid.set_tile_type(0, 0, WATER)
        shape_elevation(small_grid, max_level=4)
        assert small_grid.get_tile(0, 0).elevation == 0
        assert small_grid.get_tile(1, 1).elevation > 0

        small_grid.set_tile_type(1, 1, WATER)
        assert small_grid.get_tile(1, 1).elevation == 0

    def test_generated_heights(self) -> None:
        grid = GridStore(width=25, height=25)
        generate_terrain(grid, np.random.default_rng(3), max_elevation_level=4)
        heights = [cell.elevation for cell in grid.iter_cells()]
        assert max(heights) > 0
        assert all(0 <= h <= 4 for h in heights)
        for cell in grid.iter_cells():
            if cell.type.id == WATER_ID:
                assert cell.elevation == 0

    def test_replacement_keeps_elevation(self, small_grid: GridStore) -> None:
        small_grid.get_tile(2, 2).elevation = 3
        small_grid.set_tile_type(2, 2, get_tile_type("RESIDENTIAL_ZONE"))
        small_grid.set_tile_type(2, 2, MOUNTAIN)
        assert small_grid.get_tile(2, 2).elevation == 3

    def test_clear_keeps_elevation(self, small_grid: GridStore) -> None:
        small_grid.set_tile_type(2, 2, ROAD)
        small_grid.get_tile(2, 2).elevation = 2
        small_grid.clear_tile_data(2, 2)
        assert small_grid.get_tile(2, 2).elevation == 2

    def test_city_hall_keeps_elevation(self, small_grid: GridStore) -> None:
        small_grid.get_tile(4, 4).elevation = 2
        place_city_hall(small_grid)
        assert small_grid.get_tile(4, 4).type is CITY_HALL
        assert small_grid.get_tile(4, 4).elevation == 2
