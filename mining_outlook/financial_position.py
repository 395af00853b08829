"""Categorical financial position per trial per year.

Cumulative cash maps to three severity-ordered categories. Foreclosure is
absorbing: once the bank has acted in year t the trial stays foreclosed in
every later year, even if its cash would mathematically recover. The
override is applied over the whole year axis after the per-year threshold
check.
"""

from enum import IntEnum

import numpy as np
import pandas as pd

from .exceptions import InvalidParameters


class FinancialPosition(IntEnum):
    """Severity-ordered position categories."""

    HEALTHY = 0
    DISTRESSED = 1
    FORECLOSED = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()


def enforce_absorbing(positions: np.ndarray) -> np.ndarray:
    """Force every year after a foreclosure to be foreclosed.

    Idempotent: applying it to its own output changes nothing.

    Args:
        positions: Trial-by-year array of :class:`FinancialPosition` codes.

    Returns:
        New array with foreclosure propagated forward along the year axis.
    """
    positions = np.asarray(positions)
    foreclosed = np.logical_or.accumulate(positions == FinancialPosition.FORECLOSED, axis=1)
    return np.where(foreclosed, FinancialPosition.FORECLOSED, positions).astype(np.int8)


def classify(cumulative_cash: np.ndarray, foreclosure_threshold: float) -> np.ndarray:
    """Classify cumulative cash into financial positions.

    - Healthy: ``cash >= 0``
    - Distressed: ``foreclosure_threshold <= cash < 0``
    - Foreclosed: ``cash < foreclosure_threshold``, and every later year

    Args:
        cumulative_cash: Trial-by-year cumulative cash.
        foreclosure_threshold: Zero or negative cash level below which the
            bank forecloses.

    Returns:
        ``int8`` array of :class:`FinancialPosition` codes.

    Raises:
        InvalidParameters: If the threshold is positive or not finite.
    """
    if not np.isfinite(foreclosure_threshold) or foreclosure_threshold > 0:
        raise InvalidParameters(
            f"Foreclosure threshold must be finite and <= 0, got {foreclosure_threshold}"
        )
    cash = np.asarray(cumulative_cash, dtype=float)
    if cash.ndim != 2:
        raise InvalidParameters(f"Expected a trial-by-year table, got shape {cash.shape}")

    positions = np.full(cash.shape, FinancialPosition.HEALTHY, dtype=np.int8)
    positions[cash < 0] = FinancialPosition.DISTRESSED
    positions[cash < foreclosure_threshold] = FinancialPosition.FORECLOSED
    return enforce_absorbing(positions)


def foreclosure_year(positions: np.ndarray) -> np.ndarray:
    """First foreclosed year (1-based) per trial, 0 when never foreclosed."""
    foreclosed = np.asarray(positions) == FinancialPosition.FORECLOSED
    return np.where(foreclosed.any(axis=1), foreclosed.argmax(axis=1) + 1, 0)


def to_frame(positions: np.ndarray) -> pd.DataFrame:
    """Ordered categorical DataFrame with ``trial`` index and ``year`` columns."""
    codes = np.asarray(positions)
    trial_count, year_count = codes.shape
    dtype = pd.CategoricalDtype([position.label for position in FinancialPosition], ordered=True)
    frame = pd.DataFrame(
        {
            year: pd.Categorical.from_codes(codes[:, year - 1], dtype=dtype)
            for year in range(1, year_count + 1)
        },
        index=pd.RangeIndex(trial_count, name="trial"),
    )
    frame.columns.name = "year"
    frame.attrs["name"] = "financial_position"
    return frame
