"""Ledger — per-tick city finances and headline metrics.

Every tile charges its carry cost and every populated building pays tax
on its population.  Tax is cut sharply for buildings in poor shape:
residential by land value, commercial and industrial by how full they
are, with a further cut for buildings flagged as struggling.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tilecity.catalog.tile_types import ZoneCategory
from tilecity.simulation.constants import MAX_TILE_VALUE

if TYPE_CHECKING:
    from tilecity.simulation.config import SimulationConfig
    from tilecity.world.cell import GridCell
    from tilecity.world.grid import GridStore


@dataclass(frozen=True)
class TickReport:
    """Finances for one tick.

    Attributes:
        taxes: Total tax collected.
        costs: Total carry cost charged.
        net: ``taxes - costs``; added to the budget.
    """

    taxes: float = 0.0
    costs: float = 0.0
    net: float = 0.0


@dataclass
class Ledger:
    """City budget plus population, employment and satisfaction metrics.

    Attributes:
        config: Supplies the tax-bracket calibration.
        budget: Current funds.
        population: Total residential population after the last tick.
        employment_rate: Employed share of the workforce, in percent.
        city_satisfaction: Average populated residential land value as a
            percentage of MAX_TILE_VALUE (50 when there is none).
        last_report: Finances of the most recent tick.
    """

    config: SimulationConfig
    budget: float = 0.0
    population: int = 0
    employment_rate: float = 100.0
    city_satisfaction: float = 50.0
    last_report: TickReport = field(default_factory=TickReport)

    def spend(self, amount: float) -> bool:
        """Deduct ``amount`` if affordable; return False otherwise."""
        if amount > self.budget:
            return False
        self.budget -= amount
        return True

    def process(self, grid: GridStore) -> TickReport:
        """Charge carry costs, collect taxes and refresh the metrics.

        Args:
            grid: The grid after this tick's lifecycle pass.

        Returns:
            The tick's TickReport.
        """
        costs = 0.0
        taxes = 0.0
        workforce = 0
        jobs = 0
        satisfaction_sum = 0.0
        satisfaction_count = 0

        for cell in grid.iter_cells():
            kind = cell.type
            costs += kind.carry_cost
            if kind.tax_rate_per_population > 0 and cell.population > 0:
                taxes += self.tax_for(cell)
            jobs += kind.jobs_provided
            if kind.zone_category is ZoneCategory.RESIDENTIAL:
                workforce += cell.population
                if cell.population > 0:
                    satisfaction_sum += cell.tile_value
                    satisfaction_count += 1

        net = taxes - costs
        self.budget += net
        self.population = workforce
        if workforce > 0:
            self.employment_rate = min(jobs, workforce) / workforce * 100.0
        else:
            self.employment_rate = 100.0
        if satisfaction_count > 0:
            average = satisfaction_sum / satisfaction_count
            self.city_satisfaction = average / MAX_TILE_VALUE * 100.0
        else:
            self.city_satisfaction = 50.0

        self.last_report = TickReport(taxes=taxes, costs=costs, net=net)
        return self.last_report

    def tax_for(self, cell: GridCell) -> float:
        """Return the tax a single building pays this tick."""
        cfg = self.config
        nominal = cell.population * cell.type.tax_rate_per_population

        if cell.type.zone_category is ZoneCategory.RESIDENTIAL:
            measure = cell.tile_value
            severe = cfg.r_tax_desirability_threshold_severe
            low = cfg.r_tax_desirability_threshold_low
        else:
            measure = cell.population_ratio
            severe = cfg.ci_tax_population_ratio_severe
            low = cfg.ci_tax_population_ratio_low

        if measure < severe:
            nominal *= cfg.severe_tax_multiplier
        elif measure < low:
            nominal *= cfg.low_tax_multiplier

        if cell.is_visually_struggling:
            nominal *= cfg.struggling_tax_multiplier
        return nominal
