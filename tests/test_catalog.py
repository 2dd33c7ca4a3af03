"""Tests for tilecity.catalog — tile-type definitions and lookups."""

import pytest

from tilecity.catalog.tile_types import (
    GRASS,
    MAX_ZONE_LEVEL,
    MOUNTAIN,
    PARK,
    TILE_TYPES,
    ZoneCategory,
    all_tile_types,
    find_by_id,
    get_tile_type,
    levels_for,
)


class TestLookups:
    """Tests for key and id lookups."""

    def test_get_by_key(self) -> None:
        assert get_tile_type("GRASS") is GRASS

    def test_unknown_key_raises(self) -> None:
        with pytest.raises(KeyError):
            get_tile_type("SKYSCRAPER")

    def test_find_accepts_id_or_key(self) -> None:
        assert find_by_id("park") is PARK
        assert find_by_id("PARK") is PARK

    def test_find_unknown_returns_none(self) -> None:
        assert find_by_id("lava") is None

    def test_ids_are_unique(self) -> None:
        ids = [t.id for t in all_tile_types()]
        assert len(ids) == len(set(ids))

    def test_definitions_are_frozen(self) -> None:
        with pytest.raises(AttributeError):
            GRASS.cost = 99  # type: ignore[misc]


class TestLevels:
    """Tests for the generated RCI building levels."""

    @pytest.mark.parametrize("category", list(ZoneCategory))
    def test_three_levels_per_category(self, category: ZoneCategory) -> None:
        levels = levels_for(category)
        assert [t.level for t in levels] == list(range(1, MAX_ZONE_LEVEL + 1))

    @pytest.mark.parametrize("category", list(ZoneCategory))
    def test_level_chain_links(self, category: ZoneCategory) -> None:
        l1, l2, l3 = levels_for(category)
        zone = get_tile_type(f"{category.name}_ZONE")
        assert zone.develops_into == l1.key
        assert l1.develops_into == l2.key
        assert l2.develops_into == l3.key
        assert l3.develops_into is None
        assert l1.reverts_to == zone.key
        assert l3.reverts_to == l2.key
        assert {l1.base_tile, l2.base_tile, l3.base_tile} == {zone.key}

    def test_residential_formula(self) -> None:
        l2 = get_tile_type("RESIDENTIAL_L2")
        assert l2.population_capacity == 20
        assert l2.jobs_provided == 0
        assert l2.tax_rate_per_population == pytest.approx(0.9)
        assert l2.carry_cost == pytest.approx(5.0)

    def test_commercial_formula(self) -> None:
        l3 = get_tile_type("COMMERCIAL_L3")
        assert l3.population_capacity == 15
        assert l3.jobs_provided == 18
        assert l3.tax_rate_per_population == pytest.approx(1.7)
        assert l3.carry_cost == pytest.approx(9.0)

    def test_industrial_formula(self) -> None:
        l1 = get_tile_type("INDUSTRIAL_L1")
        assert l1.population_capacity == 8
        assert l1.jobs_provided == 12
        assert l1.tax_rate_per_population == pytest.approx(0.75)
        assert l1.carry_cost == pytest.approx(6.0)

    def test_buildings_have_no_build_cost(self) -> None:
        for tile in all_tile_types():
            if tile.is_building:
                assert tile.cost is None


class TestFlags:
    """Tests for classification flags."""

    def test_mountain_is_obstacle(self) -> None:
        assert MOUNTAIN.is_obstacle
        assert MOUNTAIN.is_nature

    def test_city_hall_is_obstacle(self) -> None:
        assert TILE_TYPES["CITY_HALL"].is_obstacle

    def test_zones_are_developable(self) -> None:
        for category in ZoneCategory:
            zone = get_tile_type(f"{category.name}_ZONE")
            assert zone.is_zone
            assert zone.is_developable_zone
            assert not zone.is_building
            assert zone.zone_category is category

    def test_parks(self) -> None:
        assert PARK.is_park
        assert TILE_TYPES["NATURAL_PARK"].is_park
        assert not GRASS.is_park
