"""Configuration management using Pydantic v2 models.

The configuration is hierarchical: simulation execution parameters,
caller-supplied economic constants, the stochastic inputs of the operating
mine, the relation of the prospect mine's inputs to them, and logging.

Sub-modules:
    core: Master Config class with YAML loading and logging setup.
    economics: Sale-price schedule, exploration tables, cost structure.
    presets: Gold-mine case-study defaults and variable names.
    reporting: Logging configuration.
    simulation: Trial and year counts, seed, workers.
    variables: PERT triples, dependency kinds and second-asset policies.

Examples:
    Quick start with defaults::

        from mining_outlook.config import Config

        config = Config()

    Loading from file::

        config = Config.from_yaml(Path("gold_mine.yaml"))

Note:
    All monetary values are in nominal dollars. Rates are decimals
    (0.07 = 7%).
"""

from .core import Config
from .economics import MineEconomicsConfig
from .presets import (
    EQUIPMENT_LABOUR_COST,
    GOLD_PRICE,
    INTEREST_RATE,
    LEASE_PROFIT,
    PRODUCTION,
    REPUTATION_DAYS,
    default_asset1_variables,
    default_asset2_policies,
)
from .reporting import LoggingConfig
from .simulation import SimulationConfig
from .variables import AssetPolicySpec, DependencyKind, PERTSpec, VariableSpec

__all__ = [
    "Config",
    "MineEconomicsConfig",
    "SimulationConfig",
    "LoggingConfig",
    "AssetPolicySpec",
    "DependencyKind",
    "PERTSpec",
    "VariableSpec",
    "default_asset1_variables",
    "default_asset2_policies",
    "EQUIPMENT_LABOUR_COST",
    "GOLD_PRICE",
    "INTEREST_RATE",
    "LEASE_PROFIT",
    "PRODUCTION",
    "REPUTATION_DAYS",
]
