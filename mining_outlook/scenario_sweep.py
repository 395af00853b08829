"""Scenario sweeps over decision vectors.

Replays many decision vectors against one fixed pair of environments and
reduces each to a row of summary metrics at a chosen year. Because every
decision sees the same draws, differences between rows come from the
decisions alone.

Example:
    >>> from mining_outlook import Config, MiningSimulation
    >>> from mining_outlook.decisions import decision_grid
    >>> from mining_outlook.scenario_sweep import ScenarioSweeper, rank
    >>>
    >>> sim = MiningSimulation(Config())
    >>> sweeper = ScenarioSweeper(sim)
    >>> df = sweeper.sweep(decision_grid([None, 1, 2, 3, 4, 5], range(6)), n_workers=4)
    >>> best = rank(df).head()
"""

import logging
import time
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from .config.economics import MineEconomicsConfig
from .decisions import DecisionReplay, DecisionVector
from .environment import Environment
from .exceptions import InvalidDecision, InvalidParameters
from .financial_position import FinancialPosition, classify
from .parallel_executor import ParallelExecutor
from .simulation import Environments, MiningSimulation

logger = logging.getLogger(__name__)

SWEEP_COLUMNS = [
    "decision",
    "sell_year",
    "funding_level",
    "close_year",
    "foreclosed_count",
    "foreclosure_probability",
    "median_cash",
    "mean_cash",
    "std_cash",
    "p05_cash",
    "p95_cash",
    "discovery_rate",
]


def _evaluate_decision(
    decision: DecisionVector,
    asset1: Environment,
    asset2: Environment,
    economics: MineEconomicsConfig,
    summary_year: int,
) -> Dict[str, Any]:
    """Evaluate one decision vector and reduce it to a result row.

    Module-level so it can be pickled for worker processes.
    """
    result = DecisionReplay(economics).replay(asset1, asset2, decision)
    positions = classify(result.cumulative_cash, economics.foreclosure_threshold)
    cash = result.cumulative_cash[:, summary_year - 1]
    final = positions[:, summary_year - 1]
    foreclosed = int(np.count_nonzero(final == FinancialPosition.FORECLOSED))
    p05, p95 = np.percentile(cash, [5, 95])
    return {
        "decision": decision.label,
        "sell_year": decision.sell_year,
        "funding_level": decision.funding_level,
        "close_year": decision.close_year,
        "foreclosed_count": foreclosed,
        "foreclosure_probability": foreclosed / len(cash),
        "median_cash": float(np.median(cash)),
        "mean_cash": float(np.mean(cash)),
        "std_cash": float(np.std(cash)),
        "p05_cash": float(p05),
        "p95_cash": float(p95),
        "discovery_rate": float(np.mean(result.found_year > 0)),
    }


def rank(df: pd.DataFrame) -> pd.DataFrame:
    """Order sweep rows by fewest foreclosures, then highest median cash."""
    return df.sort_values(
        ["foreclosed_count", "median_cash"], ascending=[True, False], kind="mergesort"
    ).reset_index(drop=True)


class ScenarioSweeper:
    """Evaluate a set of decision vectors on common random numbers.

    Attributes:
        simulation: Simulation providing configuration and environments.
        environments: Environments shared by every decision; built on the
            first sweep when not supplied.
    """

    def __init__(
        self, simulation: MiningSimulation, environments: Optional[Environments] = None
    ):
        self.simulation = simulation
        self.environments = environments

    def sweep(
        self,
        decisions: Sequence[Any],
        summary_year: Optional[int] = None,
        n_workers: Optional[int] = 1,
        progress: bool = True,
    ) -> pd.DataFrame:
        """Execute the sweep.

        Args:
            decisions: Decision vectors or action mappings.
            summary_year: 1-based year the metrics refer to; defaults to the
                last simulated year.
            n_workers: Worker processes; ``None`` uses the physical cores.
            progress: Show a tqdm progress bar.

        Returns:
            DataFrame with one row per decision, in input order.

        Raises:
            InvalidDecision: If any decision is malformed. Nothing is
                evaluated in that case.
            InvalidParameters: If ``summary_year`` is out of range.
        """
        config = self.simulation.config
        year_count = config.simulation.year_count
        summary_year = year_count if summary_year is None else summary_year
        if not 1 <= summary_year <= year_count:
            raise InvalidParameters(f"summary_year must be in 1..{year_count}, got {summary_year}")

        vectors: List[DecisionVector] = []
        issues: List[str] = []
        for index, decision in enumerate(decisions):
            try:
                vector = DecisionVector.coerce(decision)
                vector.validate(year_count, config.economics.max_funding_level)
            except InvalidDecision as e:
                issues.extend(f"decision {index}: {issue}" for issue in e.issues)
                continue
            vectors.append(vector)
        if issues:
            raise InvalidDecision(issues)

        if self.environments is None:
            self.environments = self.simulation.build_environments()

        logger.info(f"Starting sweep of {len(vectors)} decisions at year {summary_year}")
        start = time.time()
        executor = ParallelExecutor(n_workers=n_workers, show_progress=progress)
        rows = executor.map(
            _evaluate_decision,
            vectors,
            shared={
                "asset1": self.environments.asset1,
                "asset2": self.environments.asset2,
                "economics": config.economics,
                "summary_year": summary_year,
            },
            desc="Scenario sweep",
        )
        logger.info(f"Sweep finished in {time.time() - start:.2f}s")
        return pd.DataFrame(rows, columns=SWEEP_COLUMNS)
