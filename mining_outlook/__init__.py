"""Mining Outlook"""

from ._version import __version__

# Use lazy imports to avoid import issues during test discovery
# Direct imports are defined but modules are imported only when accessed

__all__ = [
    "__version__",
    "ActivitySchedule",
    "CashFlowEvaluator",
    "CashFlowResult",
    "Config",
    "DecisionReplay",
    "DecisionVector",
    "DualAssetBuilder",
    "Environment",
    "EnvironmentGenerator",
    "FinancialPosition",
    "InvalidDecision",
    "InvalidEnvironment",
    "InvalidParameters",
    "MiningOutlookError",
    "MiningSimulation",
    "PERTParams",
    "ScenarioSweeper",
    "SimulationResults",
]


def __getattr__(name):
    """Lazy import modules to avoid circular dependencies during test discovery."""
    if name in ("ActivitySchedule", "CashFlowEvaluator", "CashFlowResult"):
        from .cash_flow import ActivitySchedule, CashFlowEvaluator, CashFlowResult

        return locals()[name]
    elif name == "Config":
        from .config import Config

        return Config
    elif name == "DecisionReplay" or name == "DecisionVector":
        from .decisions import DecisionReplay, DecisionVector

        return locals()[name]
    elif name == "DualAssetBuilder":
        from .dual_asset import DualAssetBuilder

        return DualAssetBuilder
    elif name == "Environment" or name == "EnvironmentGenerator":
        from .environment import Environment, EnvironmentGenerator

        return locals()[name]
    elif name == "FinancialPosition":
        from .financial_position import FinancialPosition

        return FinancialPosition
    elif name in [
        "InvalidDecision",
        "InvalidEnvironment",
        "InvalidParameters",
        "MiningOutlookError",
    ]:
        from .exceptions import (
            InvalidDecision,
            InvalidEnvironment,
            InvalidParameters,
            MiningOutlookError,
        )

        return locals()[name]
    elif name == "MiningSimulation" or name == "SimulationResults":
        from .simulation import MiningSimulation, SimulationResults

        return locals()[name]
    elif name == "PERTParams":
        from .pert import PERTParams

        return PERTParams
    elif name == "ScenarioSweeper":
        from .scenario_sweep import ScenarioSweeper

        return ScenarioSweeper
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
