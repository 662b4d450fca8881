# tests/analysis/test_monte_carlo.py
# Monte Carlo 三角分布模拟测试 / Triangular Monte Carlo simulation tests

import math
import random

import pytest
from decisionlab.analysis.monte_carlo import DEFAULT_TRIALS, sample_triangular, simulate
from decisionlab.primitives.models import SimulationResult


class TestSampleTriangular:
    def test_endpoints(self):
        assert sample_triangular(0.0, -100.0, 50.0, 500.0) == pytest.approx(-100.0)
        assert sample_triangular(1.0, -100.0, 50.0, 500.0) == pytest.approx(500.0)

    def test_split_point_hits_mode(self):
        u = (50.0 - -100.0) / (500.0 - -100.0)
        assert sample_triangular(u, -100.0, 50.0, 500.0) == pytest.approx(50.0)

    def test_mode_at_minimum(self):
        value = sample_triangular(0.5, 0.0, 0.0, 10.0)
        assert 0.0 <= value <= 10.0


class TestDegenerate:
    def test_equal_bounds(self):
        result = simulate(100, 100, 100)
        assert result == SimulationResult(mean=100, median=100, p10=100, p90=100, prob_loss=0.0)

    def test_inverted_negative_range_is_certain_loss(self):
        result = simulate(-50, -60, -80)
        assert result.mean == -60
        assert result.p10 == -50
        assert result.p90 == -80
        assert result.prob_loss == 1.0

    def test_non_finite_inputs_yield_zero(self):
        assert simulate(math.nan, 0, 10) == SimulationResult.zero()
        assert simulate(0, 5, math.inf) == SimulationResult.zero()


class TestSimulate:
    def test_seeded_result_within_range(self):
        result = simulate(-100000, 50000, 500000, trials=10000, seed=7)
        for value in (result.mean, result.median, result.p10, result.p90):
            assert -100000 <= value <= 500000
        assert 0.0 <= result.prob_loss <= 1.0
        assert result.p10 <= result.median <= result.p90

    def test_same_seed_is_identical(self):
        a = simulate(-100000, 50000, 500000, seed=42)
        b = simulate(-100000, 50000, 500000, seed=42)
        assert a == b

    def test_injected_rng_wins_over_seed(self):
        a = simulate(0, 5, 10, trials=500, rng=random.Random(1), seed=99)
        b = simulate(0, 5, 10, trials=500, rng=random.Random(1))
        assert a == b

    def test_unseeded_runs_converge(self):
        expected = (-100000 + 50000 + 500000) / 3
        means = [simulate(-100000, 50000, 500000).mean for _ in range(3)]
        for mean in means:
            assert mean == pytest.approx(expected, rel=0.05)

    def test_mode_outside_range_is_clamped(self):
        clamped = simulate(0, 10, 10, trials=2000, seed=3)
        outside = simulate(0, 25, 10, trials=2000, seed=3)
        assert outside == clamped

    def test_percentile_indices(self):
        class _Sequence:
            def __init__(self):
                self._values = iter([i / 10 for i in range(10)])

            def random(self):
                return next(self._values)

        result = simulate(0, 5, 10, trials=10, rng=_Sequence())
        samples = sorted(sample_triangular(i / 10, 0, 5, 10) for i in range(10))
        assert result.median == pytest.approx(samples[5])
        assert result.p10 == pytest.approx(samples[1])
        assert result.p90 == pytest.approx(samples[9])
        assert result.mean == pytest.approx(sum(samples) / 10)

    def test_prob_loss_counts_negative_samples(self):
        result = simulate(-10, 0, 10, trials=4000, seed=11)
        assert result.prob_loss == pytest.approx(0.5, abs=0.05)

    def test_trials_floor_at_one(self):
        result = simulate(0, 5, 10, trials=0, seed=1)
        assert result.median == result.p10 == result.p90 == result.mean

    def test_default_trials(self):
        assert DEFAULT_TRIALS == 10000
