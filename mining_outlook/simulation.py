"""Simulation engine for the mine outlook.

Orchestrates one complete run: generate the operating mine's environment,
derive the prospect mine's environment from it, replay a decision vector
against both, and classify the resulting cumulative cash into financial
positions.

Environments are built once and can be reused by any number of decision
vectors, so scenarios are compared on common random numbers.

Examples:
    Baseline run of the gold-mine case study::

        from mining_outlook import Config, MiningSimulation

        config = Config.from_dict({"simulation": {"random_seed": 2024}}, Config())
        sim = MiningSimulation(config)
        results = sim.run()
        print(results.summary())

    Replaying a second decision on the same draws::

        environments = sim.build_environments()
        base = sim.run(environments=environments)
        sold = sim.run(DecisionVector(sell_year=1), environments=environments)
"""

from dataclasses import dataclass
import logging
import time
from typing import Any, Dict, NamedTuple, Optional

import numpy as np
import pandas as pd

from .cash_flow import CashFlowResult
from .config import Config
from .decisions import DecisionReplay, DecisionVector
from .dual_asset import DualAssetBuilder
from .environment import Environment, EnvironmentGenerator, year_frame
from .financial_position import FinancialPosition, classify, foreclosure_year, to_frame
from .summary_statistics import bootstrap_foreclosure_ci, foreclosure_curve, summarize_year

logger = logging.getLogger(__name__)


class Environments(NamedTuple):
    """Operating mine and (unshifted) prospect mine environments of one run."""

    asset1: Environment
    asset2: Environment


@dataclass
class SimulationResults:
    """Outputs of one decision vector over every trial.

    Attributes:
        decision: Decision vector that was replayed.
        cash_flow: Revenue, cost, profit and cumulative cash tables.
        positions: Trial-by-year :class:`FinancialPosition` codes.
        execution_time: Wall-clock seconds spent evaluating.
    """

    decision: DecisionVector
    cash_flow: CashFlowResult
    positions: np.ndarray
    execution_time: float = 0.0

    @property
    def trial_count(self) -> int:
        return self.cash_flow.trial_count

    @property
    def year_count(self) -> int:
        return self.cash_flow.year_count

    @property
    def cumulative_cash(self) -> np.ndarray:
        return self.cash_flow.cumulative_cash

    def foreclosure_years(self) -> np.ndarray:
        return foreclosure_year(self.positions)

    def tables(self) -> Dict[str, pd.DataFrame]:
        """The five trial-by-year output tables as DataFrames."""
        return {
            "revenue": year_frame(self.cash_flow.revenue, name="revenue"),
            "cost": year_frame(self.cash_flow.total_cost, name="cost"),
            "profit": year_frame(self.cash_flow.period_profit, name="profit"),
            "cumulative_cash": year_frame(self.cash_flow.cumulative_cash, name="cumulative_cash"),
            "financial_position": to_frame(self.positions),
        }

    def summary(self, year: Optional[int] = None, n_bootstrap: int = 200) -> str:
        """Generate summary report of ``year`` (default: the last year)."""
        year = self.year_count if year is None else year
        stats = summarize_year(self.cumulative_cash, self.positions, year)
        ci_lower, ci_upper = bootstrap_foreclosure_ci(
            self.positions, year, n_bootstrap=n_bootstrap, seed=0
        )
        curve = foreclosure_curve(self.positions)
        lines = [
            "Mine Outlook Simulation Results",
            "=" * 40,
            f"Decision: {self.decision.label}",
            f"Trials: {self.trial_count:,}",
            f"Years: {self.year_count}",
            f"Execution time: {self.execution_time:.2f} seconds",
            "",
            f"Cumulative cash at year {year}:",
            f"  Mean:   ${stats.mean:,.0f}",
            f"  Median: ${stats.median:,.0f}",
            f"  P5:     ${stats.percentiles[5]:,.0f}",
            f"  P95:    ${stats.percentiles[95]:,.0f}",
            "",
            f"Financial position at year {year}:",
        ]
        for position in FinancialPosition:
            count = stats.position_counts[position.label]
            lines.append(f"  {position.label:12s}: {count:8,d} ({count / stats.trial_count:6.2%})")
        lines.append("")
        lines.append(
            f"Foreclosure probability: {stats.foreclosure_probability:6.2%} "
            f"[{ci_lower:6.2%}, {ci_upper:6.2%}]"
        )
        lines.append("Cumulative foreclosure by year:")
        for t, prob in enumerate(curve, start=1):
            lines.append(f"  {t:3d}: {prob:6.2%}")
        return "\n".join(lines)


class MiningSimulation:
    """Run the mine outlook for one configuration.

    Args:
        config: Complete configuration; sections left at their defaults give
            the gold-mine case study.
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        sim = self.config.simulation
        self.generator = EnvironmentGenerator(
            sim.trial_count,
            sim.year_count,
            seed=sim.random_seed,
            block_size=sim.block_size,
            n_workers=sim.n_workers,
        )
        self.decision_replay = DecisionReplay(self.config.economics)

    @property
    def seed(self) -> int:
        return self.generator.seed

    def build_environments(self) -> Environments:
        """Generate both assets' environments.

        Raises:
            InvalidParameters: If a variable's PERT spec is malformed.
            InvalidEnvironment: If a second-asset policy is inconsistent.
        """
        start = time.time()
        asset1 = self.generator.build(self.config.asset1, asset="asset1", exploration=True)
        builder = DualAssetBuilder.from_config(self.config.asset2)
        asset2 = builder.build_second_asset(asset1, self.config.asset1, self.generator)
        logger.info(
            f"Built environments: {asset1.trial_count:,} trials x {asset1.year_count} years "
            f"(seed {self.seed}) in {time.time() - start:.2f}s"
        )
        return Environments(asset1, asset2)

    def run(
        self,
        decision: Any = None,
        environments: Optional[Environments] = None,
    ) -> SimulationResults:
        """Replay ``decision`` and classify the outcome.

        Args:
            decision: :class:`DecisionVector`, mapping of actions, or ``None``
                for the baseline.
            environments: Environments to reuse; generated when omitted.

        Returns:
            SimulationResults of every trial.
        """
        decision = DecisionVector.coerce(decision)
        if environments is None:
            decision.validate(
                self.config.simulation.year_count, self.config.economics.max_funding_level
            )
            environments = self.build_environments()

        start = time.time()
        cash_flow = self.decision_replay.replay(environments.asset1, environments.asset2, decision)
        positions = classify(cash_flow.cumulative_cash, self.config.economics.foreclosure_threshold)
        elapsed = time.time() - start
        logger.info(f"Evaluated {decision.label} in {elapsed:.2f}s")
        return SimulationResults(decision, cash_flow, positions, execution_time=elapsed)
