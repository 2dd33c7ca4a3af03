"""Shared fixtures for the tilecity test suite."""

from __future__ import annotations

import numpy as np
import pytest
from numpy.random import Generator

from tilecity.simulation.config import SimulationConfig
from tilecity.simulation.engine import SimulationEngine
from tilecity.world.grid import GridStore
from tilecity.zones.scheduler import VirtualScheduler


@pytest.fixture
def rng() -> Generator:
    """A deterministic random generator for reproducible tests."""
    return np.random.default_rng(seed=12345)


@pytest.fixture
def scheduler() -> VirtualScheduler:
    """A fresh virtual clock at t=0."""
    return VirtualScheduler()


@pytest.fixture
def small_grid(scheduler: VirtualScheduler) -> GridStore:
    """A small 8x8 all-grass grid wired to the scheduler fixture."""
    return GridStore(width=8, height=8, scheduler=scheduler)


@pytest.fixture
def default_config() -> SimulationConfig:
    """Default simulation config (no YAML file needed)."""
    return SimulationConfig()


@pytest.fixture
def grass_config() -> SimulationConfig:
    """A 10x10 all-grass session with a budget of 100."""
    return SimulationConfig(
        seed=7,
        grid_width=10,
        grid_height=10,
        initial_budget=100.0,
        generate_map=False,
    )


@pytest.fixture
def grass_engine(grass_config: SimulationConfig) -> SimulationEngine:
    """An engine over an all-grass 10x10 grid with a budget of 100."""
    return SimulationEngine(config=grass_config)
