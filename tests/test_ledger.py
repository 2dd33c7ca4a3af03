"""Tests for tilecity.economy — taxes, upkeep and city metrics."""

import pytest

from tilecity.catalog.tile_types import ROAD, get_tile_type
from tilecity.economy.ledger import Ledger, TickReport
from tilecity.simulation.config import SimulationConfig
from tilecity.world.cell import GridCell
from tilecity.world.grid import GridStore


@pytest.fixture
def ledger(default_config: SimulationConfig) -> Ledger:
    return Ledger(config=default_config, budget=100.0)


def _building(
    grid: GridStore,
    x: int,
    y: int,
    key: str,
    population: int,
    tile_value: float = 100.0,
) -> GridCell:
    grid.set_tile_type(x, y, get_tile_type(key))
    cell = grid.get_tile(x, y)
    cell.population = population
    cell.tile_value = tile_value
    return cell


class TestFinances:
    """Tests for the per-tick budget update."""

    def test_empty_grid(self, ledger: Ledger, small_grid: GridStore) -> None:
        report = ledger.process(small_grid)
        assert report == TickReport(taxes=0.0, costs=0.0, net=0.0)
        assert ledger.budget == 100.0

    def test_road_upkeep(self, ledger: Ledger, small_grid: GridStore) -> None:
        small_grid.set_tile_type(0, 0, ROAD)
        report = ledger.process(small_grid)
        assert report.costs == pytest.approx(0.5)
        assert report.taxes == 0.0
        assert ledger.budget == pytest.approx(99.5)

    def test_full_residential_tax(
        self,
        ledger: Ledger,
        small_grid: GridStore,
    ) -> None:
        _building(small_grid, 1, 1, "RESIDENTIAL_L1", population=10)
        report = ledger.process(small_grid)
        assert report.taxes == pytest.approx(7.0)
        assert report.costs == pytest.approx(3.5)
        assert report.net == pytest.approx(3.5)
        assert ledger.budget == pytest.approx(103.5)

    def test_budget_conservation(
        self,
        ledger: Ledger,
        small_grid: GridStore,
    ) -> None:
        small_grid.set_tile_type(0, 0, ROAD)
        _building(small_grid, 1, 1, "RESIDENTIAL_L2", population=13, tile_value=45.0)
        _building(small_grid, 2, 2, "COMMERCIAL_L1", population=3)
        _building(small_grid, 3, 3, "INDUSTRIAL_L3", population=20)
        before = ledger.budget
        report = ledger.process(small_grid)
        assert ledger.budget == before + report.net
        assert report.net == report.taxes - report.costs
        assert ledger.last_report is report


class TestTaxBrackets:
    """Tests for reduced taxes on weak buildings."""

    @pytest.mark.parametrize(
        ("tile_value", "expected"),
        [(100.0, 7.0), (60.0, 7.0), (50.0, 2.1), (20.0, 0.35)],
    )
    def test_residential_by_tile_value(
        self,
        ledger: Ledger,
        small_grid: GridStore,
        tile_value: float,
        expected: float,
    ) -> None:
        cell = _building(small_grid, 1, 1, "RESIDENTIAL_L1", 10, tile_value)
        assert ledger.tax_for(cell) == pytest.approx(expected)

    @pytest.mark.parametrize(
        ("population", "expected"),
        [(5, 5.5), (2, 0.66), (1, 0.33)],
    )
    def test_commercial_by_population_ratio(
        self,
        ledger: Ledger,
        small_grid: GridStore,
        population: int,
        expected: float,
    ) -> None:
        cell = _building(small_grid, 1, 1, "COMMERCIAL_L1", population)
        assert ledger.tax_for(cell) == pytest.approx(expected)

    def test_industrial_severe_band(
        self,
        ledger: Ledger,
        small_grid: GridStore,
    ) -> None:
        cell = _building(small_grid, 1, 1, "INDUSTRIAL_L3", population=2)
        # ratio 2/24 is below 0.2
        assert ledger.tax_for(cell) == pytest.approx(2 * 1.25 * 0.05)

    def test_struggling_halves_tax(
        self,
        ledger: Ledger,
        small_grid: GridStore,
    ) -> None:
        cell = _building(small_grid, 1, 1, "RESIDENTIAL_L1", population=10)
        cell.is_visually_struggling = True
        assert ledger.tax_for(cell) == pytest.approx(3.5)


class TestMetrics:
    """Tests for population, employment and satisfaction."""

    def test_defaults_without_residents(
        self,
        ledger: Ledger,
        small_grid: GridStore,
    ) -> None:
        ledger.process(small_grid)
        assert ledger.population == 0
        assert ledger.employment_rate == 100.0
        assert ledger.city_satisfaction == 50.0

    def test_population_and_employment(
        self,
        ledger: Ledger,
        small_grid: GridStore,
    ) -> None:
        _building(small_grid, 1, 1, "RESIDENTIAL_L1", population=10)
        _building(small_grid, 2, 2, "COMMERCIAL_L1", population=1)
        ledger.process(small_grid)
        assert ledger.population == 10
        assert ledger.employment_rate == pytest.approx(60.0)

    def test_full_employment_caps_at_100(
        self,
        ledger: Ledger,
        small_grid: GridStore,
    ) -> None:
        _building(small_grid, 1, 1, "RESIDENTIAL_L1", population=5)
        _building(small_grid, 2, 2, "INDUSTRIAL_L1", population=8)
        ledger.process(small_grid)
        assert ledger.employment_rate == pytest.approx(100.0)

    def test_satisfaction_from_residential_value(
        self,
        ledger: Ledger,
        small_grid: GridStore,
    ) -> None:
        _building(small_grid, 1, 1, "RESIDENTIAL_L1", 10, tile_value=127.5)
        _building(small_grid, 2, 2, "RESIDENTIAL_L1", 0, tile_value=0.0)
        ledger.process(small_grid)
        assert ledger.city_satisfaction == pytest.approx(50.0)

    def test_spend(self, ledger: Ledger) -> None:
        assert ledger.spend(40.0)
        assert ledger.budget == 60.0
        assert not ledger.spend(60.5)
        assert ledger.budget == 60.0
