"""
Simple z-score detector: latest sample vs. the mean/std of every prior sample.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, NamedTuple

from .. import stats
from ..models import VarianceMode
from ..params import SimpleAnomalyParams
from .base import AnomalyDetector, ResourceResult

MIN_SAMPLES = 5


@dataclass
class UtilizationAnomaly(ResourceResult):
    last_utilization_percent: float
    mean_utilization_percent: float
    std_utilization_percent: float
    z_score: float
    anomaly: bool
    threshold: float
    variance_mode: str
    ci_level: float
    ci_distribution: str
    ci_critical: float
    mean_lower: float
    mean_upper: float
    method: str = field(default="zscore", init=False)


class BaselineProfile(NamedTuple):
    """Latest sample against the statistics of the samples before it"""

    latest: float
    baseline_count: int
    mean: float
    std: float
    z_score: float
    critical: stats.CriticalValue
    lower: float
    upper: float


def profile_latest(series: Sequence[float], variance_mode: VarianceMode) -> BaselineProfile:
    """Split a series (len >= 2) into latest + baseline and describe the latest sample"""
    latest = series[-1]
    baseline = series[:-1]
    center = stats.mean(baseline)
    spread = stats.std(baseline, variance_mode)
    critical = stats.critical_value(len(baseline))
    lower, upper = stats.confidence_interval(center, spread, critical.critical)

    return BaselineProfile(
        latest=latest,
        baseline_count=len(baseline),
        mean=center,
        std=spread,
        z_score=stats.z_score(latest, center, spread),
        critical=critical,
        lower=lower,
        upper=upper,
    )


class ZScoreDetector(AnomalyDetector):
    """Flags the latest sample when |z| >= threshold"""

    def __init__(self, params: SimpleAnomalyParams | None = None):
        self.params = params or SimpleAnomalyParams()

    @property
    def name(self) -> str:
        return "zscore"

    @property
    def history_window(self) -> int:
        return self.params.window

    def get_config(self) -> dict[str, Any]:
        return {
            "window": self.params.window,
            "z_threshold": self.params.z_threshold,
            "variance_mode": self.params.variance_mode.value,
            "min_samples": MIN_SAMPLES,
        }

    def detect(self, resource_id: str, series: Sequence[float]) -> UtilizationAnomaly | None:
        if len(series) < MIN_SAMPLES:
            return None

        p = self.params
        profile = profile_latest(series, p.variance_mode)

        return UtilizationAnomaly(
            resource_id=resource_id,
            samples=len(series),
            last_utilization_percent=profile.latest,
            mean_utilization_percent=profile.mean,
            std_utilization_percent=profile.std,
            z_score=profile.z_score,
            anomaly=abs(profile.z_score) >= p.z_threshold,
            threshold=p.z_threshold,
            variance_mode=p.variance_mode.value,
            ci_level=stats.CI_LEVEL,
            ci_distribution=profile.critical.distribution,
            ci_critical=profile.critical.critical,
            mean_lower=profile.lower,
            mean_upper=profile.upper,
        )
