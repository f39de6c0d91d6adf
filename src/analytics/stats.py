"""
Statistics kernel shared by every forecaster and detector.

Small baselines get Student's t critical values instead of the normal 1.96 so
confidence intervals widen when only a handful of samples back them.
"""

from collections.abc import Sequence
from typing import NamedTuple

import numpy as np

from .models import VarianceMode

CI_LEVEL = 0.95
Z_CRITICAL_95 = 1.96

# Two-tailed 95% Student's t critical values, index = degrees of freedom - 1 (df 1..29)
T_CRITICAL_95 = (
    12.706, 4.303, 3.182, 2.776, 2.571, 2.447, 2.365, 2.306, 2.262, 2.228,
    2.201, 2.179, 2.160, 2.145, 2.131, 2.120, 2.110, 2.101, 2.093, 2.086,
    2.080, 2.074, 2.069, 2.064, 2.060, 2.056, 2.052, 2.048, 2.045,
)  # fmt: skip


class CriticalValue(NamedTuple):
    critical: float
    distribution: str  # "t" or "z"


def mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def variance(values: Sequence[float], mode: VarianceMode = VarianceMode.POPULATION) -> float:
    """Population (divide by n) or sample (divide by n - 1) variance

    Sample variance needs at least two values; with fewer it is 0.
    """
    n = len(values)
    if n == 0:
        return 0.0
    if mode == VarianceMode.SAMPLE:
        return float(np.var(values, ddof=1)) if n > 1 else 0.0
    return float(np.var(values))


def std(values: Sequence[float], mode: VarianceMode = VarianceMode.POPULATION) -> float:
    return float(np.sqrt(variance(values, mode)))


def critical_value(baseline_count: int) -> CriticalValue:
    """Critical value for a 95% two-tailed interval over ``baseline_count`` samples

    Uses the t table for 1 <= df < 30 and the normal approximation otherwise
    (including df < 1).
    """
    df = baseline_count - 1
    if 1 <= df < 30:
        return CriticalValue(T_CRITICAL_95[df - 1], "t")
    return CriticalValue(Z_CRITICAL_95, "z")


def confidence_interval(center: float, spread: float, critical: float) -> tuple[float, float]:
    return center - critical * spread, center + critical * spread


def z_score(value: float, center: float, spread: float) -> float:
    """Standard score, defined as 0 when there is no spread"""
    return (value - center) / spread if spread > 0 else 0.0


def coefficient_of_variation(values: Sequence[float]) -> float:
    """Population std / mean clamped to [0, 1]; 0 when the mean is not positive"""
    center = mean(values)
    if center <= 0:
        return 0.0
    return min(1.0, std(values) / center)
