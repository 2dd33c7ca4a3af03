"""Balance constants for the field, growth and struggle models.

Session-level settings (grid size, budget, tax brackets, timer delays)
live in ``SimulationConfig``; the values here tune the simulation rules
themselves and are shared by every session.
"""

from __future__ import annotations

# -- Field bounds -------------------------------------------------------------

MAX_TILE_VALUE = 255.0
MAX_POLLUTION = 255.0
BASE_TILE_VALUE = 50.0

# -- Pollution ----------------------------------------------------------------

POLLUTION_PER_INDUSTRIAL_POPULATION_UNIT = 0.1
INDUSTRIAL_POLLUTION_TRANSFER_TO_WATER_FACTOR = 0.5
POLLUTION_DECAY_FACTOR = 0.98
WATER_POLLUTION_DECAY_FACTOR = 0.99  # water holds pollution longer
POLLUTION_SPREAD_FACTOR = 0.1
WATER_POLLUTION_SPREAD_FACTOR = 0.2
WATER_POLLUTION_TO_LAND_FACTOR = 0.05
WATER_POLLUTION_AFFECTS_LAND_RADIUS = 1
MOUNTAIN_POLLUTION_REFLECTION_FACTOR = 0.5
PARK_POLLUTION_REDUCTION_AMOUNT = 10.0
PARK_POLLUTION_REDUCTION_RADIUS = 2
PARK_SPREAD_DAMPENING_FACTOR = 0.8

# -- Land value ---------------------------------------------------------------

WATER_TILE_VALUE_BONUS = 25.0
WATER_INFLUENCE_RADIUS = 2
PARK_TILE_VALUE_BONUS = 30.0
PARK_INFLUENCE_RADIUS = 2
MOUNTAIN_TILE_VALUE_BONUS = 10.0
MOUNTAIN_INFLUENCE_RADIUS = 2
ROAD_ADJACENCY_TILE_VALUE_BONUS = 5.0
POLLUTION_TO_TILE_VALUE_MULTIPLIER = 0.5
INDUSTRIAL_SELF_POLLUTION_TO_TILE_VALUE_MULTIPLIER = 0.2

R_NEAR_C_BONUS = 8.0
R_NEAR_I_PENALTY = -12.0
C_NEAR_I_BONUS = 5.0

# -- Zone growth / decline ----------------------------------------------------

CONNECTIVITY_RADIUS = 8
INDUSTRIAL_MARKET_ACCESS_BONUS = 50.0

R_DENSITY_PENALTY_FACTOR = 0.5
R_GROWTH_THRESHOLD = 100.0
R_MIN_DESIRABILITY_FOR_GROWTH = 60.0
R_DECLINE_DESIRABILITY_THRESHOLD = 40.0
R_MIN_JOB_SCORE_FOR_NO_DECLINE = 10.0
R_GROWTH_POPULATION_RATE = 2
R_DECLINE_POPULATION_RATE = 1

C_DENSITY_PENALTY_FACTOR = 0.3
C_GROWTH_THRESHOLD = 90.0
C_MIN_DESIRABILITY_FOR_GROWTH = 55.0
C_DECLINE_DESIRABILITY_THRESHOLD = 35.0
C_MIN_CUSTOMER_SCORE_FOR_NO_DECLINE = 15.0
C_GROWTH_POPULATION_RATE = 1
C_DECLINE_POPULATION_RATE = 1

I_DENSITY_PENALTY_FACTOR = 0.2
I_GROWTH_THRESHOLD = 80.0
I_MIN_DESIRABILITY_FOR_GROWTH = 30.0
# Industry declines on worker access only
I_DECLINE_DESIRABILITY_THRESHOLD = 0.0
I_MIN_WORKER_SCORE_FOR_NO_DECLINE = 20.0
I_GROWTH_POPULATION_RATE = 3
I_DECLINE_POPULATION_RATE = 2

# -- Struggle tracking --------------------------------------------------------

STRUGGLE_POPULATION_RATIO_THRESHOLD = 0.25
STRUGGLE_VISUAL_THRESHOLD_TICKS = 3
