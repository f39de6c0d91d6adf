"""
Tests for the seasonal-residual detector.
"""

import pytest

from src.analytics.methods import (
    FallbackSimpleAnomaly,
    SeasonalResidualAnomaly,
    SeasonalResidualDetector,
)
from src.analytics.methods.seasonal_residual import adaptive_parameters, resolve_smoothing
from src.analytics.params import SeasonalAnomalyParams


class TestSmoothingResolution:
    """Tests for adaptive and explicit smoothing parameters."""

    def test_adaptive_bounds(self):
        assert adaptive_parameters(0.0) == pytest.approx((0.25, 0.125, 0.05))
        assert adaptive_parameters(1.0) == pytest.approx((0.65, 0.325, 0.20))

    def test_adaptive_beta_is_clamped(self):
        _, beta, _ = adaptive_parameters(0.0)
        assert 0.10 <= beta <= 0.40

    def test_conservative_defaults_without_adaptation(self):
        assert resolve_smoothing(SeasonalAnomalyParams(), 0.7) == (0.3, 0.15, 0.1)

    def test_explicit_override_wins_per_parameter(self):
        params = SeasonalAnomalyParams(alpha=0.6, adapt=True)

        alpha, beta, gamma = resolve_smoothing(params, 0.0)

        assert alpha == 0.6
        assert beta == pytest.approx(0.125)
        assert gamma == pytest.approx(0.05)


class TestSeasonalResidualDetector:
    """Tests for SeasonalResidualDetector."""

    def test_skips_resources_under_five_samples(self):
        detector = SeasonalResidualDetector(SeasonalAnomalyParams(season_length=6))

        assert detector.detect("room-a", [0.3, 0.3, 0.3, 0.3]) is None

    def test_falls_back_to_simple_logic(self, spike_series):
        detector = SeasonalResidualDetector(SeasonalAnomalyParams(season_length=6))
        result = detector.detect("room-a", spike_series)

        assert isinstance(result, FallbackSimpleAnomaly)
        assert result.method == "fallback_simple"
        assert result.anomaly is True
        assert result.expected_utilization_percent == pytest.approx(0.402)
        assert result.residual_delta == pytest.approx(0.55 - 0.402)
        assert result.mean_residual == 0.0

    def test_spike_over_seasonal_baseline(self, seasonal_spike_series):
        params = SeasonalAnomalyParams(z_threshold=1.0, season_length=6)
        result = SeasonalResidualDetector(params).detect("room-a", seasonal_spike_series)

        assert isinstance(result, SeasonalResidualAnomaly)
        assert result.method == "seasonal_residual"
        assert result.anomaly is True
        assert abs(result.z_score) >= 1.0
        assert result.last_utilization_percent > result.expected_upper
        assert (result.alpha, result.beta, result.gamma) == (0.3, 0.15, 0.1)
        assert result.adaptive is False

    def test_residual_delta_alone_triggers(self, seasonal_spike_series):
        params = SeasonalAnomalyParams(z_threshold=2.0, season_length=6, delta_threshold=0.08)
        result = SeasonalResidualDetector(params).detect("room-a", seasonal_spike_series)

        assert abs(result.z_score) < 2.0
        assert result.residual_delta >= 0.08
        assert result.anomaly is True

    def test_no_trigger_when_both_criteria_fail(self, seasonal_spike_series):
        params = SeasonalAnomalyParams(z_threshold=2.0, season_length=6, delta_threshold=0.5)
        result = SeasonalResidualDetector(params).detect("room-a", seasonal_spike_series)

        assert result.anomaly is False

    def test_expected_value_is_last_minus_residual(self, seasonal_spike_series):
        result = SeasonalResidualDetector().detect("room-a", seasonal_spike_series)

        assert result.expected_utilization_percent == pytest.approx(
            result.last_utilization_percent - result.last_residual
        )
        assert result.residual_delta == pytest.approx(result.last_residual - result.mean_residual)

    def test_interval_uses_raw_baseline(self, seasonal_spike_series):
        result = SeasonalResidualDetector().detect("room-a", seasonal_spike_series)

        # 12 raw baseline samples -> df 11
        assert result.ci_distribution == "t"
        assert result.ci_critical == 2.201
        assert result.expected_lower < 0.31 < result.expected_upper

    def test_adaptive_parameters_on_constant_series(self):
        params = SeasonalAnomalyParams(season_length=6, adapt=True)
        result = SeasonalResidualDetector(params).detect("room-a", [0.5] * 12)

        assert result.coefficient_of_variation == 0.0
        assert result.alpha == pytest.approx(0.25)
        assert result.beta == pytest.approx(0.125)
        assert result.gamma == pytest.approx(0.05)
        assert result.adaptive is True

    def test_adaptive_parameters_on_volatile_series(self):
        params = SeasonalAnomalyParams(season_length=6, adapt=True)
        result = SeasonalResidualDetector(params).detect("room-a", [0.1, 0.9] * 6)

        assert isinstance(result, SeasonalResidualAnomaly)
        assert result.coefficient_of_variation == pytest.approx(0.8)
        assert 0.25 < result.alpha <= 0.65
        assert 0.10 <= result.beta <= 0.40
        assert 0.05 <= result.gamma <= 0.20
        assert result.alpha == pytest.approx(0.57)
        assert result.gamma == pytest.approx(0.17)
        assert result.adaptive is True
