"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from mining_outlook.config import Config, MineEconomicsConfig, SimulationConfig
from mining_outlook.environment import EXPLORATION_DRAW, Environment
from mining_outlook.simulation import MiningSimulation


@pytest.fixture
def small_config():
    """Case-study configuration with few trials and a fixed seed."""
    return Config(
        simulation=SimulationConfig(
            trial_count=2000, year_count=5, random_seed=2024, block_size=500
        )
    )


@pytest.fixture
def simulation(small_config):
    return MiningSimulation(small_config)


@pytest.fixture
def environments(simulation):
    return simulation.build_environments()


@pytest.fixture
def flat_economics():
    """Economics without selling or reputation costs and one funding level."""
    return MineEconomicsConfig(
        selling_cost_rate=0.0,
        reputation_fixed_cost=0.0,
        reputation_cost_per_day=0.0,
        sale_price_schedule=[1000.0],
        search_cost_by_level=[0.0, 50.0],
        success_probability_by_level=[0.0, 0.05],
    )


@pytest.fixture
def make_asset1():
    """Factory of deterministic operating-mine environments.

    Every variable is zero except a unit gold price and exploration draws of
    0.9; keyword arguments replace individual tables.
    """

    def factory(year_count=4, trial_count=1, **overrides):
        shape = (trial_count, year_count)
        variables = {
            "gold_price": np.ones(shape),
            "production": np.zeros(shape),
            "equipment_labour_cost": np.zeros(shape),
            "reputation_days": np.zeros(shape),
            "lease_profit": np.zeros(shape),
            "interest_rate": np.zeros(shape),
            EXPLORATION_DRAW: np.full(shape, 0.9),
        }
        variables.update(
            {name: np.asarray(value, dtype=float) for name, value in overrides.items()}
        )
        return Environment(variables, asset="asset1")

    return factory
