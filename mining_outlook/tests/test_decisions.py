"""Tests for decision vectors and activity schedules."""

import numpy as np
import pytest

from mining_outlook.config import MineEconomicsConfig
from mining_outlook.decisions import (
    DecisionReplay,
    DecisionVector,
    baseline,
    build_schedule,
    decision_grid,
)
from mining_outlook.exceptions import InvalidDecision


@pytest.fixture
def economics():
    return MineEconomicsConfig()


class TestDecisionVector:
    """Test construction and validation."""

    def test_baseline(self):
        decision = baseline()
        assert decision == DecisionVector()
        assert decision.label == "sell=never|fund=0|close=never"

    def test_list_levels_become_tuple(self):
        decision = DecisionVector(funding_levels=[1, 2, 3])
        assert decision.funding_levels == (1, 2, 3)
        assert decision.funding_level == "1/2/3"
        assert hash(decision)

    def test_uniform_tuple_collapses(self):
        assert DecisionVector(funding_levels=(2, 2, 2)).funding_level == 2

    def test_from_mapping_rejects_unknown_action(self):
        with pytest.raises(InvalidDecision):
            DecisionVector.from_mapping({"sell_year": 2, "hedge_ratio": 0.5})

    def test_coerce(self):
        assert DecisionVector.coerce(None) == DecisionVector()
        assert DecisionVector.coerce({"sell_year": 3}).sell_year == 3
        with pytest.raises(InvalidDecision):
            DecisionVector.coerce("sell in year 2")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"sell_year": 0},
            {"sell_year": 6},
            {"sell_year": True},
            {"sell_year": 2.0},
            {"close_year": 7},
            {"funding_levels": 6},
            {"funding_levels": -1},
            {"funding_levels": (1, 2)},
        ],
    )
    def test_out_of_range(self, kwargs):
        with pytest.raises(InvalidDecision):
            DecisionVector(**kwargs).validate(year_count=5, max_level=5)

    def test_all_issues_reported(self):
        with pytest.raises(InvalidDecision) as exc_info:
            DecisionVector(sell_year=9, funding_levels=9, close_year=9).validate(5, 5)
        assert len(exc_info.value.issues) == 3

    def test_grid(self):
        grid = decision_grid([None, 1, 2, 3, 4, 5], range(6))
        assert len(grid) == 36
        assert len(set(grid)) == 36
        assert grid[0] == DecisionVector()


class TestBuildSchedule:
    """Test decision vectors resolved into masks."""

    def test_baseline_schedule(self, economics):
        draws = np.random.default_rng(0).random((50, 5))
        schedule = build_schedule(DecisionVector(), draws, economics)
        assert schedule.owned.all()
        assert not schedule.sale_proceeds.any()
        assert not schedule.search_cost.any()
        assert not schedule.prospect_active.any()
        assert not schedule.found_year.any()

    def test_sale(self, economics):
        schedule = build_schedule(DecisionVector(sell_year=3), np.full((2, 5), 0.9), economics)
        np.testing.assert_array_equal(schedule.owned[0], [True, True, False, False, False])
        np.testing.assert_array_equal(schedule.sale_proceeds[1], [0, 0, 3_500_000, 0, 0])

    def test_discovery_and_closure(self, economics):
        """Test search stops after discovery and the found mine runs until closure."""
        draws = np.array(
            [
                [0.9, 0.01, 0.9, 0.9, 0.9],
                [0.9, 0.9, 0.9, 0.9, 0.9],
                [0.01, 0.01, 0.01, 0.01, 0.01],
            ]
        )
        schedule = build_schedule(DecisionVector(funding_levels=1, close_year=5), draws, economics)
        np.testing.assert_array_equal(schedule.found_year, [2, 0, 1])
        np.testing.assert_array_equal(schedule.prospect_start_year, [3, 0, 2])
        np.testing.assert_array_equal(
            schedule.search_cost,
            [
                [500_000, 500_000, 0, 0, 0],
                [500_000] * 5,
                [500_000, 0, 0, 0, 0],
            ],
        )
        np.testing.assert_array_equal(
            schedule.prospect_active,
            [
                [False, False, True, True, False],
                [False] * 5,
                [False, True, True, True, False],
            ],
        )

    def test_close_before_discovery(self, economics):
        draws = np.array([[0.9, 0.9, 0.01, 0.9, 0.9]])
        schedule = build_schedule(DecisionVector(funding_levels=1, close_year=2), draws, economics)
        assert schedule.found_year[0] == 3
        assert not schedule.prospect_active.any()
        assert schedule.search_cost[0].sum() == 3 * 500_000

    def test_per_year_levels(self, economics):
        """Test unfunded years cannot succeed even with a low draw."""
        draws = np.array([[0.9, 0.01, 0.01, 0.9, 0.9]])
        schedule = build_schedule(DecisionVector(funding_levels=(1, 0, 1, 0, 0)), draws, economics)
        assert schedule.found_year[0] == 3
        np.testing.assert_array_equal(schedule.search_cost[0], [500_000, 0, 500_000, 0, 0])

    def test_higher_funding_finds_more(self, economics):
        """Test common random numbers make discovery monotone in the funding level."""
        draws = np.random.default_rng(1).random((2000, 5))
        found = [
            build_schedule(DecisionVector(funding_levels=level), draws, economics).found_year > 0
            for level in range(6)
        ]
        for lower, higher in zip(found, found[1:]):
            assert np.all(higher >= lower)

    def test_invalid_decision(self, economics):
        with pytest.raises(InvalidDecision):
            build_schedule(DecisionVector(sell_year=6), np.zeros((2, 5)), economics)


class TestDecisionReplay:
    """Test replaying decisions against a fixed environment."""

    def test_baseline_matches_evaluator(self, environments, small_config):
        replay = DecisionReplay(small_config.economics)
        a = replay.replay(environments.asset1, environments.asset2)
        b = replay.replay(environments.asset1, environments.asset2, DecisionVector())
        np.testing.assert_array_equal(a.cumulative_cash, b.cumulative_cash)

    def test_replay_is_deterministic(self, environments, small_config):
        replay = DecisionReplay(small_config.economics)
        decision = DecisionVector(sell_year=2, funding_levels=3)
        a = replay.replay(environments.asset1, environments.asset2, decision)
        b = replay.replay(environments.asset1, environments.asset2, decision)
        np.testing.assert_array_equal(a.cumulative_cash, b.cumulative_cash)

    def test_schedule_accepts_mapping(self, environments, small_config):
        replay = DecisionReplay(small_config.economics)
        schedule = replay.schedule(environments.asset1, {"funding_levels": 5})
        assert schedule.found_year.shape == (small_config.simulation.trial_count,)
        assert (schedule.found_year > 0).mean() > 0.5
