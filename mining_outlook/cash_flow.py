"""Per-trial, per-year cash flows of the mining operation.

For every trial and every year, in increasing year order:

1. revenue is production x gold price x (1 - selling cost rate), for the
   operating mine and, while active, the found mine;
2. operating cost is equipment and labour cost (both mines), plus the
   reputation-management cost of the leased property while it is owned;
3. lease income is the leased property's profit while it is owned;
4. a financing charge applies the year's interest rate to a negative
   opening cash balance (positive cash earns nothing);
5. period profit nets the above with exploration spend, sale cost and
   sale proceeds;
6. cumulative cash accumulates period profit from the opening cash.

Operator choices arrive already resolved into trial-by-year masks
(:class:`ActivitySchedule`, built by :mod:`mining_outlook.decisions`), so
the evaluator itself never branches on a decision. The financing charge
depends on the previous year's cash, so years are processed sequentially
while trials are vectorised.
"""

from dataclasses import dataclass, fields
import logging
from typing import Dict, Optional, Tuple

import numpy as np
import pandas as pd

from .config.economics import MineEconomicsConfig
from .config.presets import (
    EQUIPMENT_LABOUR_COST,
    GOLD_PRICE,
    INTEREST_RATE,
    LEASE_PROFIT,
    PRODUCTION,
    REPUTATION_DAYS,
)
from .dual_asset import DualAssetBuilder
from .environment import EXPLORATION_DRAW, Environment, year_frame
from .exceptions import InvalidEnvironment

logger = logging.getLogger(__name__)

ASSET1_VARIABLES = (
    GOLD_PRICE,
    PRODUCTION,
    EQUIPMENT_LABOUR_COST,
    REPUTATION_DAYS,
    LEASE_PROFIT,
    INTEREST_RATE,
)
ASSET2_VARIABLES = (GOLD_PRICE, PRODUCTION, EQUIPMENT_LABOUR_COST)


@dataclass
class ActivitySchedule:
    """Trial-by-year masks and one-time amounts implied by a decision vector.

    Attributes:
        owned: Whether the leased property is still owned.
        sale_proceeds: Sale price credited in the sale year.
        sale_cost: Transaction cost paid in the sale year.
        search_cost: Exploration spend while searching.
        prospect_active: Whether the found mine produces and costs money.
        found_year: 1-based year of discovery per trial, 0 when never found.
    """

    owned: np.ndarray
    sale_proceeds: np.ndarray
    sale_cost: np.ndarray
    search_cost: np.ndarray
    prospect_active: np.ndarray
    found_year: np.ndarray

    @classmethod
    def idle(cls, trial_count: int, year_count: int) -> "ActivitySchedule":
        """Schedule with the lease kept, no exploration spend and nothing found."""
        shape = (trial_count, year_count)
        zeros = np.zeros(shape)
        return cls(
            owned=np.ones(shape, dtype=bool),
            sale_proceeds=zeros,
            sale_cost=zeros,
            search_cost=zeros,
            prospect_active=np.zeros(shape, dtype=bool),
            found_year=np.zeros(trial_count, dtype=int),
        )

    @property
    def shape(self) -> Tuple[int, int]:
        return self.owned.shape

    @property
    def prospect_start_year(self) -> np.ndarray:
        """Global year that is the found mine's own year 1 (0 when never found)."""
        return np.where(self.found_year > 0, self.found_year + 1, 0)


@dataclass
class CashFlowResult:
    """Trial-by-year cash-flow tables of one scenario.

    All tables have shape ``(trial_count, year_count)``; ``found_year`` has
    one entry per trial (0 when the prospect was never found).
    """

    revenue: np.ndarray
    operating_cost: np.ndarray
    lease_income: np.ndarray
    search_cost: np.ndarray
    sale_cost: np.ndarray
    sale_proceeds: np.ndarray
    financing_cost: np.ndarray
    period_profit: np.ndarray
    cumulative_cash: np.ndarray
    found_year: np.ndarray

    @property
    def total_cost(self) -> np.ndarray:
        """Operating cost plus exploration, sale and financing costs."""
        return self.operating_cost + self.search_cost + self.sale_cost + self.financing_cost

    @property
    def trial_count(self) -> int:
        return self.cumulative_cash.shape[0]

    @property
    def year_count(self) -> int:
        return self.cumulative_cash.shape[1]

    def to_frames(self) -> Dict[str, pd.DataFrame]:
        """One DataFrame per table, indexed by ``trial`` with ``year`` columns."""
        frames = {
            f.name: year_frame(getattr(self, f.name), name=f.name)
            for f in fields(self)
            if f.name != "found_year"
        }
        frames["total_cost"] = year_frame(self.total_cost, name="total_cost")
        return frames

    def to_long(self, name: str) -> pd.DataFrame:
        """Tidy ``trial, year, <name>`` frame of one table."""
        table = self.total_cost if name == "total_cost" else getattr(self, name)
        return (
            year_frame(table)
            .reset_index()
            .melt(id_vars="trial", var_name="year", value_name=name)
            .sort_values(["trial", "year"], ignore_index=True)
        )


class CashFlowEvaluator:
    """Evaluate cash flows of one or two assets under an activity schedule.

    Args:
        economics: Caller-supplied constants (selling cost rate, reputation
            cost structure, sale-price schedule, exploration tables).

    Examples:
        Operating mine alone, lease kept, no exploration::

            evaluator = CashFlowEvaluator(config.economics)
            result = evaluator.evaluate(asset1)
            year5_cash = result.cumulative_cash[:, 4]

        Decision vectors are resolved by
        :class:`~mining_outlook.decisions.DecisionReplay`, which hands the
        resulting schedule to this evaluator.
    """

    def __init__(self, economics: MineEconomicsConfig):
        self.economics = economics

    def _check(self, asset1_env: Environment, asset2_env: Optional[Environment]) -> None:
        asset1_env.require(*ASSET1_VARIABLES, EXPLORATION_DRAW)
        if asset2_env is None:
            return
        asset2_env.require(*ASSET2_VARIABLES)
        if asset2_env.trial_count != asset1_env.trial_count:
            raise InvalidEnvironment(
                f"Asset 1 has {asset1_env.trial_count} trials but asset 2 has "
                f"{asset2_env.trial_count}"
            )
        if asset2_env.year_count != asset1_env.year_count:
            raise InvalidEnvironment(
                f"Asset 1 has {asset1_env.year_count} years but asset 2 has "
                f"{asset2_env.year_count}"
            )

    def evaluate(
        self,
        asset1_env: Environment,
        asset2_env: Optional[Environment] = None,
        schedule: Optional[ActivitySchedule] = None,
    ) -> CashFlowResult:
        """Compute revenue, costs, profit and cumulative cash.

        Args:
            asset1_env: Environment of the operating mine, including the
                exploration draws.
            asset2_env: Unshifted environment of the prospect mine. Without
                it a discovery changes nothing but the exploration spend.
            schedule: Decisions resolved into trial-by-year masks. ``None``
                keeps the lease and spends nothing on exploration.

        Returns:
            CashFlowResult for every trial and year.

        Raises:
            InvalidEnvironment: On missing variables, misaligned assets or a
                schedule of the wrong shape.
        """
        self._check(asset1_env, asset2_env)
        shape = (asset1_env.trial_count, asset1_env.year_count)
        if schedule is None:
            schedule = ActivitySchedule.idle(*shape)
        elif schedule.shape != shape:
            raise InvalidEnvironment(
                f"Activity schedule has shape {schedule.shape} but the environment is {shape}"
            )
        logger.debug(f"Evaluating cash flows over {shape[0]} trials x {shape[1]} years")

        econ = self.economics
        net_rate = 1.0 - econ.selling_cost_rate

        revenue = asset1_env[PRODUCTION] * asset1_env[GOLD_PRICE] * net_rate
        operating_cost = asset1_env[EQUIPMENT_LABOUR_COST].copy()

        if asset2_env is not None:
            prospect = DualAssetBuilder.shifted(asset2_env, schedule.prospect_start_year)
            active = schedule.prospect_active
            revenue = revenue + np.where(
                active, prospect[PRODUCTION] * prospect[GOLD_PRICE] * net_rate, 0.0
            )
            operating_cost += np.where(active, prospect[EQUIPMENT_LABOUR_COST], 0.0)

        reputation_cost = econ.reputation_fixed_cost + econ.reputation_cost_per_day * asset1_env[
            REPUTATION_DAYS
        ]
        operating_cost += np.where(schedule.owned, reputation_cost, 0.0)
        lease_income = np.where(schedule.owned, asset1_env[LEASE_PROFIT], 0.0)

        before_financing = (
            revenue
            - operating_cost
            + lease_income
            - schedule.search_cost
            - schedule.sale_cost
            + schedule.sale_proceeds
        )

        trial_count, year_count = revenue.shape
        interest_rate = asset1_env[INTEREST_RATE]
        financing_cost = np.zeros((trial_count, year_count))
        period_profit = np.empty((trial_count, year_count))
        cumulative_cash = np.empty((trial_count, year_count))
        cash = np.full(trial_count, float(econ.opening_cash))
        for t in range(year_count):
            financing_cost[:, t] = np.where(cash < 0, -cash * interest_rate[:, t], 0.0)
            period_profit[:, t] = before_financing[:, t] - financing_cost[:, t]
            cash = cash + period_profit[:, t]
            cumulative_cash[:, t] = cash

        return CashFlowResult(
            revenue=revenue,
            operating_cost=operating_cost,
            lease_income=lease_income,
            search_cost=np.array(schedule.search_cost, dtype=float),
            sale_cost=np.array(schedule.sale_cost, dtype=float),
            sale_proceeds=np.array(schedule.sale_proceeds, dtype=float),
            financing_cost=financing_cost,
            period_profit=period_profit,
            cumulative_cash=cumulative_cash,
            found_year=schedule.found_year,
        )
