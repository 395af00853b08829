"""Summary statistics over trials for one scenario.

Works on the trial-by-year cumulative cash and financial position tables
produced by a run: per-year distribution summaries, cumulative foreclosure
and survival curves, bootstrap confidence intervals on foreclosure
probability, and lower-tail risk measures of cumulative cash.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

from .exceptions import InvalidParameters
from .financial_position import FinancialPosition


@dataclass
class YearSummary:
    """Distribution of cumulative cash and positions at one year."""

    year: int
    trial_count: int
    mean: float
    median: float
    std: float
    minimum: float
    maximum: float
    percentiles: Dict[float, float]
    position_counts: Dict[str, int]

    @property
    def foreclosure_probability(self) -> float:
        return self.position_counts[FinancialPosition.FORECLOSED.label] / self.trial_count

    def to_dict(self) -> Dict[str, float]:
        """Flat record, suitable for a DataFrame row."""
        record: Dict[str, float] = {
            "year": self.year,
            "trial_count": self.trial_count,
            "mean": self.mean,
            "median": self.median,
            "std": self.std,
            "min": self.minimum,
            "max": self.maximum,
        }
        record.update({f"p{p:g}": value for p, value in self.percentiles.items()})
        record.update({label.lower(): count for label, count in self.position_counts.items()})
        return record


def _year_column(table: np.ndarray, year: int) -> np.ndarray:
    year_count = table.shape[1]
    if not 1 <= year <= year_count:
        raise InvalidParameters(f"year must be in 1..{year_count}, got {year}")
    return table[:, year - 1]


def summarize_year(
    cumulative_cash: np.ndarray,
    positions: np.ndarray,
    year: int,
    percentiles: Tuple[float, ...] = (1, 5, 25, 75, 95, 99),
) -> YearSummary:
    """Summarize cumulative cash and position counts of one year.

    Args:
        cumulative_cash: Trial-by-year cumulative cash.
        positions: Matching :class:`FinancialPosition` codes.
        year: 1-based year.
        percentiles: Percentiles of cumulative cash to report.

    Returns:
        YearSummary of the requested year.
    """
    cash = _year_column(np.asarray(cumulative_cash, dtype=float), year)
    codes = _year_column(np.asarray(positions), year)
    return YearSummary(
        year=year,
        trial_count=len(cash),
        mean=float(np.mean(cash)),
        median=float(np.median(cash)),
        std=float(np.std(cash)),
        minimum=float(np.min(cash)),
        maximum=float(np.max(cash)),
        percentiles={p: float(v) for p, v in zip(percentiles, np.percentile(cash, percentiles))},
        position_counts={
            position.label: int(np.count_nonzero(codes == position))
            for position in FinancialPosition
        },
    )


def foreclosure_curve(positions: np.ndarray) -> np.ndarray:
    """Share of trials foreclosed at or before each year."""
    return np.mean(np.asarray(positions) == FinancialPosition.FORECLOSED, axis=0)


def survival_curve(positions: np.ndarray) -> np.ndarray:
    """Share of trials not yet foreclosed at each year."""
    return 1.0 - foreclosure_curve(positions)


def bootstrap_foreclosure_ci(
    positions: np.ndarray,
    year: int,
    n_bootstrap: int = 1000,
    confidence_level: float = 0.95,
    seed: Optional[int] = None,
) -> Tuple[float, float]:
    """Percentile bootstrap interval of the foreclosure probability at ``year``.

    Resamples trials with replacement; trials are independent so the
    foreclosed indicator can be resampled directly.
    """
    if n_bootstrap < 1:
        raise InvalidParameters(f"n_bootstrap must be at least 1, got {n_bootstrap}")
    if not 0 < confidence_level < 1:
        raise InvalidParameters(f"confidence_level must be in (0, 1), got {confidence_level}")

    foreclosed = _year_column(np.asarray(positions), year) == FinancialPosition.FORECLOSED
    rng = np.random.default_rng(seed)
    n_trials = len(foreclosed)
    bootstrap_probs = np.empty(n_bootstrap)
    for i in range(n_bootstrap):
        sample = rng.integers(0, n_trials, size=n_trials)
        bootstrap_probs[i] = foreclosed[sample].mean()

    alpha = 1 - confidence_level
    lower = np.percentile(bootstrap_probs, alpha / 2 * 100)
    upper = np.percentile(bootstrap_probs, (1 - alpha / 2) * 100)
    return float(lower), float(upper)


def value_at_risk(cash: np.ndarray, level: float = 0.95) -> float:
    """Cumulative cash exceeded by ``level`` of trials (lower-tail quantile)."""
    if not 0 < level < 1:
        raise InvalidParameters(f"level must be in (0, 1), got {level}")
    return float(np.percentile(np.asarray(cash, dtype=float), (1 - level) * 100))


def conditional_value_at_risk(cash: np.ndarray, level: float = 0.95) -> float:
    """Mean cumulative cash of the trials at or below :func:`value_at_risk`."""
    cash = np.asarray(cash, dtype=float)
    var = value_at_risk(cash, level)
    return float(cash[cash <= var].mean())
