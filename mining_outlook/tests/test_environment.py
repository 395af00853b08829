"""Tests for environment generation."""

import numpy as np
import pytest

from mining_outlook._warnings import DataQualityWarning
from mining_outlook.config import DependencyKind, PERTSpec, VariableSpec, default_asset1_variables
from mining_outlook.environment import (
    EXPLORATION_DRAW,
    Environment,
    EnvironmentGenerator,
    block_rng,
    generate,
    resolve_specs,
    year_frame,
)
from mining_outlook.exceptions import InvalidEnvironment, InvalidParameters
from mining_outlook.pert import PERTParams


class TestGenerate:
    """Test single-variable generation for each dependency kind."""

    def test_independent_shape_and_bounds(self):
        rng = np.random.default_rng(0)
        table = generate(1000, 5, "independent", PERTParams(10, 100, 30), rng=rng)
        assert table.shape == (1000, 5)
        assert table.min() >= 10
        assert table.max() <= 100

    def test_independent_years_uncorrelated(self):
        rng = np.random.default_rng(5)
        table = generate(20_000, 5, "independent", PERTParams(1.5e6, 4e6, 2.5e6), rng=rng)
        correlations = np.corrcoef(table.T)
        off_diagonal = correlations[~np.eye(5, dtype=bool)]
        assert np.abs(off_diagonal).max() < 0.05

    def test_autoregressive_years_correlated(self):
        """Test adjacent years of a multiplicative chain move together."""
        rng = np.random.default_rng(5)
        table = generate(
            5000,
            5,
            "autoregressive",
            PERTParams(2000, 12000, 5000),
            PERTParams(0.80, 1.10, 0.97),
            rng=rng,
        )
        correlations = np.corrcoef(table.T)
        assert np.diag(correlations, k=1).min() > 0.8

    def test_autoregressive_chain(self):
        """Test each year is the previous year times a factor within the delta bounds."""
        rng = np.random.default_rng(1)
        table = generate(
            500,
            5,
            DependencyKind.AUTOREGRESSIVE,
            PERTParams(2000, 12000, 5000),
            PERTParams(0.80, 1.10, 0.97),
            rng=rng,
        )
        ratios = table[:, 1:] / table[:, :-1]
        assert ratios.min() >= 0.80 - 1e-12
        assert ratios.max() <= 1.10 + 1e-12

    def test_fixed_base_references_year_one(self):
        """Test each year is year 1 times a factor, independent of the previous year."""
        rng = np.random.default_rng(2)
        table = generate(
            500,
            5,
            DependencyKind.FIXED_BASE,
            PERTParams(1.5e6, 4e6, 2.5e6),
            PERTParams(0.8, 1.4, 1.05),
            rng=rng,
        )
        ratios = table[:, 1:] / table[:, [0]]
        assert ratios.min() >= 0.8 - 1e-12
        assert ratios.max() <= 1.4 + 1e-12
        # Consecutive ratios are d[t] / d[t-1] and can leave the delta bounds.
        consecutive = table[:, 2:] / table[:, 1:-1]
        assert consecutive.max() > 1.4 or consecutive.min() < 0.8

    def test_additive_chain(self):
        rng = np.random.default_rng(3)
        table = generate(
            500,
            5,
            DependencyKind.ADDITIVE,
            PERTParams(1500, 1900, 1700),
            PERTParams(-100, 500, 100),
            rng=rng,
        )
        differences = np.diff(table, axis=1)
        assert differences.min() >= -100 - 1e-9
        assert differences.max() <= 500 + 1e-9

    def test_negative_values_propagate(self):
        """Test values are never clamped at zero."""
        rng = np.random.default_rng(4)
        table = generate(
            100,
            4,
            DependencyKind.ADDITIVE,
            PERTParams(0, 10, 5),
            PERTParams(-1000, -500, -800),
            rng=rng,
        )
        assert np.all(table[:, 1:] < 0)

    def test_single_year(self):
        table = generate(
            10,
            1,
            "autoregressive",
            PERTParams(1, 2, 1.5),
            PERTParams(0.9, 1.1, 1.0),
            rng=np.random.default_rng(0),
        )
        assert table.shape == (10, 1)

    def test_chained_without_delta(self):
        with pytest.raises(InvalidParameters):
            generate(10, 3, "additive", PERTParams(0, 1, 0.5))

    def test_unknown_kind(self):
        with pytest.raises(InvalidParameters):
            generate(10, 3, "seasonal", PERTParams(0, 1, 0.5))

    @pytest.mark.parametrize("counts", [(0, 5), (5, 0)])
    def test_empty_counts(self, counts):
        with pytest.raises(InvalidParameters):
            generate(*counts, "independent", PERTParams(0, 1, 0.5))


class TestEnvironment:
    """Test the environment container."""

    def test_misaligned_tables(self):
        with pytest.raises(InvalidEnvironment):
            Environment({"a": np.zeros((3, 5)), "b": np.zeros((4, 5))})

    def test_wrong_dimensions(self):
        with pytest.raises(InvalidEnvironment):
            Environment({"a": np.zeros(5)})

    def test_empty(self):
        with pytest.raises(InvalidEnvironment):
            Environment({})

    def test_missing_variable(self):
        env = Environment({"a": np.zeros((2, 3))})
        with pytest.raises(InvalidEnvironment):
            env["b"]
        with pytest.raises(InvalidEnvironment) as exc_info:
            env.require("a", "b", "c")
        assert len(exc_info.value.issues) == 2

    def test_non_finite_warns(self):
        with pytest.warns(DataQualityWarning):
            Environment({"a": np.array([[1.0, np.nan]])})

    def test_trial_slice_keeps_alignment(self):
        env = Environment(
            {"a": np.arange(12.0).reshape(4, 3), "b": -np.arange(12.0).reshape(4, 3)},
            follows_discovery=("a",),
        )
        part = env.trial_slice(1, 3)
        assert part.trial_count == 2
        np.testing.assert_array_equal(part["a"], -part["b"])
        assert part.follows_discovery == ("a",)

    def test_year_frame_labels(self):
        frame = year_frame(np.zeros((3, 5)))
        assert frame.index.name == "trial"
        assert frame.columns.name == "year"
        assert list(frame.columns) == [1, 2, 3, 4, 5]


class TestEnvironmentGenerator:
    """Test seeded, block-partitioned generation."""

    def test_default_variables(self):
        gen = EnvironmentGenerator(300, 5, seed=11, block_size=100)
        env = gen.build(default_asset1_variables())
        assert env.trial_count == 300
        assert env.year_count == 5
        assert EXPLORATION_DRAW in env
        assert env[EXPLORATION_DRAW].min() >= 0
        assert env[EXPLORATION_DRAW].max() < 1

    def test_reproducible(self):
        """Test identical seeds give bit-identical tables."""
        specs = default_asset1_variables()
        a = EnvironmentGenerator(250, 5, seed=7, block_size=100).build(specs)
        b = EnvironmentGenerator(250, 5, seed=7, block_size=100).build(specs)
        for name in a.names():
            np.testing.assert_array_equal(a[name], b[name])

    def test_different_seeds_differ(self):
        specs = default_asset1_variables()
        a = EnvironmentGenerator(100, 5, seed=1).build(specs)
        b = EnvironmentGenerator(100, 5, seed=2).build(specs)
        assert not np.array_equal(a["gold_price"], b["gold_price"])

    def test_parallel_matches_sequential(self):
        """Test worker count does not change the draws."""
        specs = default_asset1_variables()
        sequential = EnvironmentGenerator(400, 5, seed=3, block_size=100, n_workers=1)
        parallel = EnvironmentGenerator(400, 5, seed=3, block_size=100, n_workers=2)
        a = sequential.build(specs)
        b = parallel.build(specs)
        for name in a.names():
            np.testing.assert_array_equal(a[name], b[name])

    def test_blocks_cover_trials(self):
        gen = EnvironmentGenerator(250, 5, seed=0, block_size=100)
        assert gen.blocks() == [(0, 0, 100), (1, 100, 200), (2, 200, 250)]

    def test_adding_variable_keeps_others(self):
        """Test each variable draws from its own sub-stream."""
        specs = default_asset1_variables()
        a = EnvironmentGenerator(100, 5, seed=5).build(specs)
        specs["extra"] = VariableSpec(init=PERTSpec(minimum=0, maximum=1, mode=0.5))
        b = EnvironmentGenerator(100, 5, seed=5).build(specs)
        np.testing.assert_array_equal(a["production"], b["production"])

    def test_asset_label_separates_streams(self):
        specs = {"x": VariableSpec(init=PERTSpec(minimum=0, maximum=1, mode=0.5))}
        gen = EnvironmentGenerator(100, 3, seed=5)
        a = gen.build(specs, asset="asset1", exploration=False)
        b = gen.build(specs, asset="asset2", exploration=False)
        assert not np.array_equal(a["x"], b["x"])

    def test_malformed_spec_rejected_before_draws(self):
        specs = {
            "bad": VariableSpec(init=PERTSpec(minimum=10, maximum=5, mode=7)),
            "chain": VariableSpec(
                kind="additive", init=PERTSpec(minimum=0, maximum=1, mode=0.5)
            ),
        }
        with pytest.raises(InvalidParameters) as exc_info:
            resolve_specs(specs)
        assert any(issue.startswith("chain") for issue in exc_info.value.issues)
        assert any(issue.startswith("bad") for issue in exc_info.value.issues)

    def test_block_rng_is_stable(self):
        a = block_rng(1, "asset1", "gold_price", 0).random(3)
        b = block_rng(1, "asset1", "gold_price", 0).random(3)
        c = block_rng(1, "asset1", "gold_price", 1).random(3)
        np.testing.assert_array_equal(a, b)
        assert not np.array_equal(a, c)

    def test_seed_drawn_when_missing(self):
        gen = EnvironmentGenerator(10, 2)
        assert isinstance(gen.seed, int)
