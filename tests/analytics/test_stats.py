"""
Tests for the statistics kernel.
"""

import pytest

from src.analytics import stats
from src.analytics.models import VarianceMode


class TestDescriptiveStatistics:
    """Tests for mean, variance and standard deviation."""

    def test_mean_of_empty_sequence_is_zero(self):
        assert stats.mean([]) == 0.0

    def test_population_vs_sample_variance(self):
        values = [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]

        assert stats.variance(values, VarianceMode.POPULATION) == pytest.approx(4.0)
        assert stats.variance(values, VarianceMode.SAMPLE) == pytest.approx(32.0 / 7.0)
        assert stats.std(values) == pytest.approx(2.0)

    def test_sample_variance_needs_two_values(self):
        assert stats.variance([0.5], VarianceMode.SAMPLE) == 0.0
        assert stats.variance([], VarianceMode.SAMPLE) == 0.0

    def test_results_are_plain_floats(self):
        assert type(stats.mean([0.1, 0.2])) is float
        assert type(stats.std([0.1, 0.2])) is float


class TestCriticalValue:
    """Tests for the Student's t / normal critical value lookup."""

    @pytest.mark.parametrize(
        "baseline_count,expected",
        [(2, 12.706), (5, 2.776), (30, 2.045)],
    )
    def test_small_baselines_use_t_table(self, baseline_count, expected):
        critical = stats.critical_value(baseline_count)

        assert critical.distribution == "t"
        assert critical.critical == expected

    def test_large_baseline_uses_normal_approximation(self):
        assert stats.critical_value(31) == stats.CriticalValue(1.96, "z")
        assert stats.critical_value(200) == stats.CriticalValue(1.96, "z")

    def test_degenerate_baseline_uses_normal_approximation(self):
        assert stats.critical_value(1) == stats.CriticalValue(1.96, "z")
        assert stats.critical_value(0) == stats.CriticalValue(1.96, "z")

    def test_t_values_decrease_with_degrees_of_freedom(self):
        table = stats.T_CRITICAL_95

        assert len(table) == 29
        assert all(a > b for a, b in zip(table, table[1:]))
        assert table[-1] > stats.Z_CRITICAL_95


class TestScores:
    """Tests for confidence intervals, z-scores and the coefficient of variation."""

    def test_confidence_interval_is_symmetric(self):
        lower, upper = stats.confidence_interval(0.5, 0.1, 2.0)

        assert lower == pytest.approx(0.3)
        assert upper == pytest.approx(0.7)

    def test_z_score_without_spread_is_zero(self):
        assert stats.z_score(0.9, 0.5, 0.0) == 0.0

    def test_z_score(self):
        assert stats.z_score(0.7, 0.5, 0.1) == pytest.approx(2.0)

    def test_coefficient_of_variation(self):
        assert stats.coefficient_of_variation([0.5, 0.5, 0.5]) == 0.0
        assert stats.coefficient_of_variation([0.0, 0.0]) == 0.0
        assert stats.coefficient_of_variation([0.2, 0.6]) == pytest.approx(0.5)

    def test_coefficient_of_variation_is_capped_at_one(self):
        assert stats.coefficient_of_variation([0.0, 0.0, 0.0, 1.0]) == 1.0
