"""
Seasonal-residual anomaly detection.

This method separates genuine anomalies from expected seasonal/trend variation:
it runs the additive Holt-Winters recurrence over the series, keeps the
one-step-ahead residual of every sample (actual - expected), and scores the
latest residual against the residuals before it.

Workflow:
1. Coefficient of variation of the raw series (observability + adaptive tuning)
2. Smoothing parameters: explicit overrides, else derived from the CV when
   adaptation is on, else conservative defaults
3. Residual decomposition (see holt_winters.decompose)
4. z-score of the latest residual and its absolute jump over the residual mean
5. Anomaly if |z| >= threshold OR jump >= delta threshold

A moderate but abrupt seasonal deviation can trip the delta criterion even
when the residual baseline is too noisy for the z criterion.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import structlog

from .. import stats
from ..params import SeasonalAnomalyParams
from .base import AnomalyDetector, ResourceResult
from .holt_winters import decompose
from .zscore import MIN_SAMPLES, profile_latest

logger = structlog.get_logger(__name__)

# Non-adaptive smoothing defaults (more conservative than the forecaster's)
DEFAULT_ALPHA = 0.3
DEFAULT_BETA = 0.15
DEFAULT_GAMMA = 0.1


@dataclass
class SeasonalResidualAnomaly(ResourceResult):
    last_utilization_percent: float
    expected_utilization_percent: float
    projected_next_utilization_percent: float
    last_residual: float
    mean_residual: float
    std_residual: float
    residual_delta: float
    z_score: float
    anomaly: bool
    threshold: float
    season_length: int
    residual_delta_threshold: float
    alpha: float
    beta: float
    gamma: float
    adaptive: bool
    coefficient_of_variation: float
    variance_mode: str
    ci_level: float
    ci_distribution: str
    ci_critical: float
    expected_lower: float
    expected_upper: float
    method: str = field(default="seasonal_residual", init=False)


@dataclass
class FallbackSimpleAnomaly(ResourceResult):
    """Plain z-score result used when there is less than two seasons of data"""

    last_utilization_percent: float
    expected_utilization_percent: float
    last_residual: float
    mean_residual: float
    std_residual: float
    residual_delta: float
    z_score: float
    anomaly: bool
    threshold: float
    season_length: int
    coefficient_of_variation: float
    variance_mode: str
    ci_level: float
    ci_distribution: str
    ci_critical: float
    expected_lower: float
    expected_upper: float
    method: str = field(default="fallback_simple", init=False)


def adaptive_parameters(cv: float) -> tuple[float, float, float]:
    """Smoothing parameters derived from the coefficient of variation

    alpha in [0.25, 0.65], beta = alpha / 2 clamped to [0.10, 0.40],
    gamma in [0.05, 0.20]; more volatile series react faster.
    """
    alpha = 0.25 + 0.40 * cv
    beta = min(0.40, max(0.10, alpha * 0.5))
    gamma = 0.05 + 0.15 * cv
    return alpha, beta, gamma


def resolve_smoothing(params: SeasonalAnomalyParams, cv: float) -> tuple[float, float, float]:
    """Per-parameter precedence: explicit override, then adaptive derivation, then default"""
    if params.adapt:
        derived = adaptive_parameters(cv)
    else:
        derived = (DEFAULT_ALPHA, DEFAULT_BETA, DEFAULT_GAMMA)

    overrides = (params.alpha, params.beta, params.gamma)
    alpha, beta, gamma = (
        override if override is not None else value for override, value in zip(overrides, derived)
    )
    return alpha, beta, gamma


class SeasonalResidualDetector(AnomalyDetector):
    """Holt-Winters residual z-score with an absolute-delta second trigger"""

    def __init__(self, params: SeasonalAnomalyParams | None = None):
        self.params = params or SeasonalAnomalyParams()

    @property
    def name(self) -> str:
        return "seasonal_residual"

    @property
    def history_window(self) -> int:
        return self.params.window

    @property
    def min_samples(self) -> int:
        return 2 * self.params.season_length

    def get_config(self) -> dict[str, Any]:
        p = self.params
        return {
            "window": p.window,
            "z_threshold": p.z_threshold,
            "season_length": p.season_length,
            "delta_threshold": p.delta_threshold,
            "alpha": p.alpha,
            "beta": p.beta,
            "gamma": p.gamma,
            "adapt": p.adapt,
            "variance_mode": p.variance_mode.value,
        }

    def detect(
        self, resource_id: str, series: Sequence[float]
    ) -> SeasonalResidualAnomaly | FallbackSimpleAnomaly | None:
        if len(series) < self.min_samples:
            if len(series) >= MIN_SAMPLES:
                return self._fallback(resource_id, series)
            return None

        p = self.params
        cv = stats.coefficient_of_variation(series)
        alpha, beta, gamma = resolve_smoothing(p, cv)

        state = decompose(series, p.season_length, alpha, beta, gamma)
        latest_residual = state.residuals[-1]
        baseline_residuals = state.residuals[:-1]

        mean_residual = stats.mean(baseline_residuals)
        std_residual = stats.std(baseline_residuals, p.variance_mode)
        residual_delta = latest_residual - mean_residual
        z = stats.z_score(latest_residual, mean_residual, std_residual)

        # Interval over the raw (un-decomposed) baseline, for operators
        raw = profile_latest(series, p.variance_mode)

        anomaly = abs(z) >= p.z_threshold or residual_delta >= p.delta_threshold

        logger.debug(
            "Seasonal residual evaluated",
            resource_id=resource_id,
            samples=len(series),
            z_score=round(z, 4),
            residual_delta=round(residual_delta, 4),
            anomaly=anomaly,
        )

        return SeasonalResidualAnomaly(
            resource_id=resource_id,
            samples=len(series),
            last_utilization_percent=series[-1],
            expected_utilization_percent=series[-1] - latest_residual,
            projected_next_utilization_percent=state.projection(len(series)),
            last_residual=latest_residual,
            mean_residual=mean_residual,
            std_residual=std_residual,
            residual_delta=residual_delta,
            z_score=z,
            anomaly=anomaly,
            threshold=p.z_threshold,
            season_length=p.season_length,
            residual_delta_threshold=p.delta_threshold,
            alpha=alpha,
            beta=beta,
            gamma=gamma,
            adaptive=p.adapt,
            coefficient_of_variation=cv,
            variance_mode=p.variance_mode.value,
            ci_level=stats.CI_LEVEL,
            ci_distribution=raw.critical.distribution,
            ci_critical=raw.critical.critical,
            expected_lower=raw.lower,
            expected_upper=raw.upper,
        )

    def _fallback(self, resource_id: str, series: Sequence[float]) -> FallbackSimpleAnomaly:
        p = self.params
        profile = profile_latest(series, p.variance_mode)

        return FallbackSimpleAnomaly(
            resource_id=resource_id,
            samples=len(series),
            last_utilization_percent=profile.latest,
            expected_utilization_percent=profile.mean,
            last_residual=profile.latest - profile.mean,
            mean_residual=0.0,
            std_residual=profile.std,
            residual_delta=profile.latest - profile.mean,
            z_score=profile.z_score,
            anomaly=abs(profile.z_score) >= p.z_threshold,
            threshold=p.z_threshold,
            season_length=p.season_length,
            coefficient_of_variation=stats.coefficient_of_variation(series),
            variance_mode=p.variance_mode.value,
            ci_level=stats.CI_LEVEL,
            ci_distribution=profile.critical.distribution,
            ci_critical=profile.critical.critical,
            expected_lower=profile.lower,
            expected_upper=profile.upper,
        )
