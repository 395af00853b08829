"""Tests for per-year summaries and risk measures."""

import numpy as np
import pytest

from mining_outlook.exceptions import InvalidParameters
from mining_outlook.financial_position import FinancialPosition, classify
from mining_outlook.summary_statistics import (
    bootstrap_foreclosure_ci,
    conditional_value_at_risk,
    foreclosure_curve,
    summarize_year,
    survival_curve,
    value_at_risk,
)


@pytest.fixture
def synthetic():
    """1000 trials, 3 years, the first 100 foreclosed from year 2."""
    cash = np.tile(np.array([1.0, 2.0, 3.0]), (1000, 1))
    cash[:100, 1:] = -10.0
    return cash, classify(cash, -5.0)


class TestSummarizeYear:
    """Test the per-year summary."""

    def test_counts(self, synthetic):
        cash, positions = synthetic
        stats = summarize_year(cash, positions, year=2)
        assert stats.trial_count == 1000
        assert stats.position_counts == {"Healthy": 900, "Distressed": 0, "Foreclosed": 100}
        assert stats.foreclosure_probability == pytest.approx(0.1)
        assert stats.median == pytest.approx(2.0)
        assert stats.minimum == pytest.approx(-10.0)

    def test_to_dict(self, synthetic):
        cash, positions = synthetic
        record = summarize_year(cash, positions, year=1).to_dict()
        assert record["year"] == 1
        assert record["p5"] == pytest.approx(1.0)
        assert record["foreclosed"] == 0

    def test_year_out_of_range(self, synthetic):
        cash, positions = synthetic
        with pytest.raises(InvalidParameters):
            summarize_year(cash, positions, year=4)


class TestCurves:
    """Test cumulative foreclosure and survival curves."""

    def test_curves(self, synthetic):
        _, positions = synthetic
        np.testing.assert_allclose(foreclosure_curve(positions), [0.0, 0.1, 0.1])
        np.testing.assert_allclose(survival_curve(positions), [1.0, 0.9, 0.9])

    def test_bootstrap_interval_contains_estimate(self, synthetic):
        _, positions = synthetic
        lower, upper = bootstrap_foreclosure_ci(positions, year=3, n_bootstrap=500, seed=1)
        assert lower < 0.1 < upper
        assert upper - lower < 0.06

    def test_bootstrap_reproducible(self, synthetic):
        _, positions = synthetic
        a = bootstrap_foreclosure_ci(positions, year=3, n_bootstrap=100, seed=3)
        b = bootstrap_foreclosure_ci(positions, year=3, n_bootstrap=100, seed=3)
        assert a == b

    def test_no_foreclosures(self):
        positions = np.full((50, 2), FinancialPosition.HEALTHY, dtype=np.int8)
        assert bootstrap_foreclosure_ci(positions, year=2, n_bootstrap=50, seed=0) == (0.0, 0.0)

    @pytest.mark.parametrize("kwargs", [{"n_bootstrap": 0}, {"confidence_level": 1.0}])
    def test_bootstrap_arguments(self, synthetic, kwargs):
        _, positions = synthetic
        with pytest.raises(InvalidParameters):
            bootstrap_foreclosure_ci(positions, year=1, **kwargs)


class TestRiskMeasures:
    """Test lower-tail risk measures."""

    def test_value_at_risk(self):
        cash = np.arange(1.0, 101.0)
        assert value_at_risk(cash, 0.95) == pytest.approx(np.percentile(cash, 5))

    def test_conditional_below_value_at_risk(self):
        cash = np.random.default_rng(0).normal(size=10_000)
        assert conditional_value_at_risk(cash, 0.95) < value_at_risk(cash, 0.95)

    def test_invalid_level(self):
        with pytest.raises(InvalidParameters):
            value_at_risk(np.ones(5), 1.5)
