"""Operator decisions replayed against a fixed environment.

A decision vector holds the discrete choices of one scenario: when (if
ever) to sell the leased property, how much to spend on exploration each
year, and when (if ever) to close a newly found mine. Each choice drives a
one-time, irrevocable state transition per trial:

- leased property: Owned -> Sold at the start of the sale year,
- exploration: Searching -> Found on the first successful draw, then
  optionally Found -> Closed in the chosen close year.

Transition years are computed first and turned into trial-by-year masks
(:class:`ActivitySchedule`); the cash-flow arithmetic is then vectorised
over those masks. The exploration success draw compares the environment's
pre-drawn uniforms against the funding level's success probability, so
every decision vector replays against the same random draws.
"""

from dataclasses import dataclass
from itertools import product
import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from .cash_flow import ActivitySchedule, CashFlowEvaluator, CashFlowResult
from .config.economics import MineEconomicsConfig
from .environment import EXPLORATION_DRAW, Environment
from .exceptions import InvalidDecision

logger = logging.getLogger(__name__)

ACTIONS = ("sell_year", "funding_levels", "close_year")


def _is_int(value: Any) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


@dataclass(frozen=True)
class DecisionVector:
    """Discrete choices of one scenario.

    Attributes:
        sell_year: 1-based year in which the leased property is sold, or
            ``None`` to keep it.
        funding_levels: Exploration funding level, either one level for
            every year or one level per year.
        close_year: 1-based year from which a found mine stops operating, or
            ``None`` to keep it open.

    Examples:
        Sell in year 2 and fund exploration at level 3 every year::

            DecisionVector(sell_year=2, funding_levels=3)

        Fund exploration for the first two years only::

            DecisionVector(funding_levels=(4, 4, 0, 0, 0))
    """

    sell_year: Optional[int] = None
    funding_levels: Union[int, Tuple[int, ...]] = 0
    close_year: Optional[int] = None

    def __post_init__(self):
        if isinstance(self.funding_levels, (list, np.ndarray)):
            object.__setattr__(self, "funding_levels", tuple(self.funding_levels))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "DecisionVector":
        """Build from a mapping, rejecting undefined action kinds.

        Raises:
            InvalidDecision: If the mapping names an action other than
                ``sell_year``, ``funding_levels`` or ``close_year``.
        """
        unknown = sorted(set(mapping) - set(ACTIONS))
        if unknown:
            raise InvalidDecision(
                [f"Undefined action '{name}'; expected one of {ACTIONS}" for name in unknown]
            )
        return cls(**mapping)

    @classmethod
    def coerce(cls, value: Union[None, "DecisionVector", Mapping[str, Any]]) -> "DecisionVector":
        """Accept ``None`` (the baseline), a decision vector or a mapping."""
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            return cls.from_mapping(value)
        raise InvalidDecision(f"Cannot interpret {type(value).__name__} as a decision vector")

    def levels(self, year_count: int) -> np.ndarray:
        """Funding level of every year."""
        if isinstance(self.funding_levels, tuple):
            return np.asarray(self.funding_levels, dtype=np.int64)
        return np.full(year_count, self.funding_levels, dtype=np.int64)

    @property
    def funding_level(self) -> Union[int, str]:
        """Scalar funding level, or a ``/``-joined string when it varies by year."""
        if isinstance(self.funding_levels, tuple):
            if len(set(self.funding_levels)) == 1:
                return int(self.funding_levels[0])
            return "/".join(str(level) for level in self.funding_levels)
        return int(self.funding_levels)

    @property
    def label(self) -> str:
        sell = "never" if self.sell_year is None else str(self.sell_year)
        close = "never" if self.close_year is None else str(self.close_year)
        return f"sell={sell}|fund={self.funding_level}|close={close}"

    def validate(self, year_count: int, max_level: int) -> None:
        """Check years and funding levels against the horizon and level table.

        Raises:
            InvalidDecision: Listing every out-of-range choice.
        """
        issues: List[str] = []
        for name in ("sell_year", "close_year"):
            year = getattr(self, name)
            if year is None:
                continue
            if not _is_int(year) or not 1 <= year <= year_count:
                issues.append(f"{name} must be an integer in 1..{year_count}, got {year!r}")

        levels: Sequence[Any]
        if isinstance(self.funding_levels, tuple):
            levels = self.funding_levels
            if len(levels) != year_count:
                issues.append(
                    f"funding_levels has {len(levels)} entries but there are {year_count} years"
                )
        else:
            levels = [self.funding_levels]
        for level in levels:
            if not _is_int(level) or not 0 <= level <= max_level:
                issues.append(f"Funding level must be an integer in 0..{max_level}, got {level!r}")

        if issues:
            raise InvalidDecision(issues)


def baseline() -> DecisionVector:
    """No action: keep the leased property and leave exploration unfunded."""
    return DecisionVector()


def decision_grid(
    sell_years: Iterable[Optional[int]],
    funding_levels: Iterable[Union[int, Sequence[int]]],
    close_years: Iterable[Optional[int]] = (None,),
) -> List[DecisionVector]:
    """Every combination of the given choices.

    Examples:
        The 6 x 6 case-study grid::

            decision_grid([None, 1, 2, 3, 4, 5], range(6))
    """
    return [
        DecisionVector(
            sell_year=sell,
            funding_levels=tuple(level) if isinstance(level, Sequence) else level,
            close_year=close,
        )
        for sell, level, close in product(sell_years, funding_levels, close_years)
    ]


def build_schedule(
    decision: DecisionVector,
    exploration_draw: np.ndarray,
    economics: MineEconomicsConfig,
) -> ActivitySchedule:
    """Resolve a decision vector into per-trial transition years and masks.

    Args:
        decision: Choices of the scenario.
        exploration_draw: Trial-by-year uniforms in ``[0, 1)``.
        economics: Sale-price schedule and exploration tables.

    Returns:
        Activity schedule shaped like ``exploration_draw``.

    Raises:
        InvalidDecision: If the decision is out of range.
    """
    trial_count, year_count = exploration_draw.shape
    decision.validate(year_count, economics.max_funding_level)
    shape = (trial_count, year_count)
    years = np.arange(1, year_count + 1)

    sale_row = np.zeros(year_count)
    sale_cost_row = np.zeros(year_count)
    if decision.sell_year is None:
        owned_row = np.ones(year_count, dtype=bool)
    else:
        owned_row = years < decision.sell_year
        sale_row[decision.sell_year - 1] = economics.sale_price(decision.sell_year)
        sale_cost_row[decision.sell_year - 1] = economics.sale_cost

    levels = decision.levels(year_count)
    cost_row = np.asarray(economics.search_cost_by_level, dtype=float)[levels]
    probability_row = np.asarray(economics.success_probability_by_level, dtype=float)[levels]

    success = exploration_draw < probability_row[None, :]
    found_year = np.where(success.any(axis=1), success.argmax(axis=1) + 1, 0)

    # Search is funded up to and including the discovery year.
    searching = (found_year[:, None] == 0) | (years[None, :] <= found_year[:, None])
    close_year = year_count + 1 if decision.close_year is None else decision.close_year
    prospect_active = (
        (found_year[:, None] > 0) & (years[None, :] > found_year[:, None]) & (years < close_year)
    )

    return ActivitySchedule(
        owned=np.broadcast_to(owned_row, shape),
        sale_proceeds=np.broadcast_to(sale_row, shape),
        sale_cost=np.broadcast_to(sale_cost_row, shape),
        search_cost=searching * cost_row[None, :],
        prospect_active=prospect_active,
        found_year=found_year,
    )


class DecisionReplay:
    """Replay decision vectors against a fixed pair of environments.

    Args:
        economics: Caller-supplied constants.

    Examples:
        Compare selling in year 1 with the baseline on the same draws::

            replay = DecisionReplay(config.economics)
            base = replay.replay(asset1, asset2, baseline())
            sold = replay.replay(asset1, asset2, DecisionVector(sell_year=1))
    """

    def __init__(self, economics: MineEconomicsConfig):
        self.economics = economics
        self.evaluator = CashFlowEvaluator(economics)

    def schedule(self, asset1_env: Environment, decision: Any) -> ActivitySchedule:
        asset1_env.require(EXPLORATION_DRAW)
        return build_schedule(
            DecisionVector.coerce(decision), asset1_env[EXPLORATION_DRAW], self.economics
        )

    def replay(
        self,
        asset1_env: Environment,
        asset2_env: Optional[Environment] = None,
        decision: Any = None,
    ) -> CashFlowResult:
        """Evaluate cash flows under ``decision``.

        Args:
            asset1_env: Operating mine, including the exploration draws.
            asset2_env: Unshifted prospect mine, or ``None``.
            decision: :class:`DecisionVector`, a mapping of actions, or
                ``None`` for :func:`baseline`.

        Returns:
            CashFlowResult with the same shape as the baseline.

        Raises:
            InvalidEnvironment: On missing variables or misaligned assets.
            InvalidDecision: On undefined actions or out-of-range choices.
        """
        decision = DecisionVector.coerce(decision)
        schedule = self.schedule(asset1_env, decision)
        logger.debug(f"Replaying {decision.label} over {asset1_env.trial_count} trials")
        return self.evaluator.evaluate(asset1_env, asset2_env, schedule)
