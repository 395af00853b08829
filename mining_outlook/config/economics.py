"""Caller-supplied economic constants of the mine model.

These values are not drawn at random: sale-price schedule, exploration
cost and success tables, reputation-management cost structure, selling
cost rate and the foreclosure threshold.
"""

from typing import List
import warnings

from pydantic import BaseModel, Field, field_validator, model_validator

from .._warnings import ConfigurationWarning


class MineEconomicsConfig(BaseModel):
    """Fixed economic parameters supplied by the caller.

    Attributes:
        selling_cost_rate: Share of gold revenue lost to refining, transport
            and royalties.
        reputation_fixed_cost: Yearly fixed cost of managing the community
            relationship around the leased property, while it is owned.
        reputation_cost_per_day: Cost per day of reputation work; the number of
            days is a stochastic variable.
        foreclosure_threshold: Cumulative cash below which the bank forecloses.
            Must be zero or negative.
        opening_cash: Cumulative cash before year 1.
        sale_price_schedule: Sale proceeds of the leased property by sale year
            (index 0 is year 1). Years beyond the schedule reuse its last value.
        sale_cost: One-time transaction cost paid in the sale year.
        search_cost_by_level: Yearly exploration cost by funding level.
        success_probability_by_level: Yearly probability of finding the new
            mine by funding level.

    Examples:
        Two funding levels::

            economics = MineEconomicsConfig(
                search_cost_by_level=[0, 1_000_000],
                success_probability_by_level=[0.0, 0.25],
            )
    """

    selling_cost_rate: float = Field(default=0.03, ge=0, lt=1)
    reputation_fixed_cost: float = Field(default=250_000, ge=0)
    reputation_cost_per_day: float = Field(default=5_000, ge=0)
    foreclosure_threshold: float = Field(default=-4_000_000, le=0)
    opening_cash: float = Field(default=0.0)
    sale_price_schedule: List[float] = Field(
        default_factory=lambda: [1_500_000, 2_500_000, 3_500_000, 4_500_000, 5_000_000],
        min_length=1,
    )
    sale_cost: float = Field(default=0.0, ge=0)
    search_cost_by_level: List[float] = Field(
        default_factory=lambda: [0, 500_000, 1_000_000, 1_500_000, 2_000_000, 2_500_000],
        min_length=1,
    )
    success_probability_by_level: List[float] = Field(
        default_factory=lambda: [0.0, 0.05, 0.10, 0.15, 0.20, 0.25],
        min_length=1,
    )

    @field_validator("search_cost_by_level")
    @classmethod
    def validate_search_costs(cls, v: List[float]) -> List[float]:
        if any(cost < 0 for cost in v):
            raise ValueError("Search costs must be non-negative")
        return v

    @field_validator("success_probability_by_level")
    @classmethod
    def validate_probabilities(cls, v: List[float]) -> List[float]:
        if any(p < 0 or p > 1 for p in v):
            raise ValueError("Success probabilities must lie in [0, 1]")
        return v

    @model_validator(mode="after")
    def validate_level_tables(self):
        """Funding-level tables must line up; level 0 should be unfunded."""
        if len(self.search_cost_by_level) != len(self.success_probability_by_level):
            raise ValueError(
                f"search_cost_by_level has {len(self.search_cost_by_level)} levels but "
                f"success_probability_by_level has {len(self.success_probability_by_level)}"
            )
        if self.success_probability_by_level[0] > 0:
            warnings.warn(
                "Funding level 0 has a non-zero success probability; the no-action "
                "baseline will discover the new mine",
                ConfigurationWarning,
                stacklevel=2,
            )
        return self

    @property
    def max_funding_level(self) -> int:
        return len(self.search_cost_by_level) - 1

    def sale_price(self, year: int) -> float:
        """Sale proceeds when the leased property is sold in ``year`` (1-based)."""
        index = min(year, len(self.sale_price_schedule)) - 1
        return self.sale_price_schedule[index]
