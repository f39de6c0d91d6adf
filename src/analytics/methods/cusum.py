"""
Persistence (CUSUM) detector for sustained mean shifts.

Complements the single-point detectors: a lone spike barely moves the
cumulative sums, while a level shift held over several samples keeps
accumulating until it crosses the alarm threshold.

    C+_t = max(0, C+_{t-1} + (x_t - mu - k * sigma))
    C-_t = max(0, C-_{t-1} + (mu - x_t - k * sigma))

mu and sigma come from the early part of the series (first half, at least 6
samples) so that a shift late in the window is measured against pre-shift
behaviour.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from .. import stats
from ..params import PersistenceParams
from .base import AnomalyDetector, ResourceResult

MIN_SAMPLES = 10
MIN_SEGMENT = 6
SHIFT_WINDOW = 5
MIN_SHIFT_SAMPLES = 12


@dataclass
class PersistenceAnomaly(ResourceResult):
    mean_utilization_percent: float
    std_utilization_percent: float
    k: float
    h: float
    variance_mode: str
    persistence_anomaly: bool
    alarm_index: int
    alarm_type: str | None
    magnitude: float
    last_utilization_percent: float
    threshold_abs: float
    window_shift: float
    c_plus: float
    c_minus: float
    baseline_segment_size: int
    method: str = field(default="cusum", init=False)


def window_shift(series: Sequence[float]) -> float:
    """Mean of the last 5 samples minus the mean of the 5 before them (0 under 12 samples)"""
    if len(series) < MIN_SHIFT_SAMPLES:
        return 0.0
    tail = series[-SHIFT_WINDOW:]
    previous = series[-2 * SHIFT_WINDOW : -SHIFT_WINDOW]
    return stats.mean(tail) - stats.mean(previous)


class CusumDetector(AnomalyDetector):
    """Two-sided CUSUM control chart over each resource series"""

    def __init__(self, params: PersistenceParams | None = None):
        self.params = params or PersistenceParams()

    @property
    def name(self) -> str:
        return "cusum"

    @property
    def history_window(self) -> int:
        return self.params.window

    def get_config(self) -> dict[str, Any]:
        return {
            "window": self.params.window,
            "k": self.params.k,
            "h": self.params.h,
            "variance_mode": self.params.variance_mode.value,
            "min_samples": MIN_SAMPLES,
        }

    def detect(self, resource_id: str, series: Sequence[float]) -> PersistenceAnomaly | None:
        if len(series) < MIN_SAMPLES:
            return None

        p = self.params
        segment_size = max(MIN_SEGMENT, len(series) // 2)
        segment = series[:segment_size]
        segment_mean = stats.mean(segment)
        segment_std = stats.std(segment, p.variance_mode)

        drift = p.k * segment_std
        threshold_abs = p.h * segment_std

        c_plus = c_minus = 0.0
        alarm_index, alarm_type = -1, None
        for i, value in enumerate(series):
            c_plus = max(0.0, c_plus + (value - segment_mean - drift))
            c_minus = max(0.0, c_minus + (segment_mean - value - drift))
            if alarm_index == -1:
                if c_plus > threshold_abs:
                    alarm_index, alarm_type = i, "positive"
                elif c_minus > threshold_abs:
                    alarm_index, alarm_type = i, "negative"

        scale = segment_std or 1.0
        if alarm_type == "positive":
            magnitude = c_plus / scale
        elif alarm_type == "negative":
            magnitude = c_minus / scale
        else:
            magnitude = 0.0

        return PersistenceAnomaly(
            resource_id=resource_id,
            samples=len(series),
            mean_utilization_percent=stats.mean(series),
            std_utilization_percent=segment_std,
            k=p.k,
            h=p.h,
            variance_mode=p.variance_mode.value,
            persistence_anomaly=alarm_index != -1,
            alarm_index=alarm_index,
            alarm_type=alarm_type,
            magnitude=magnitude,
            last_utilization_percent=series[-1],
            threshold_abs=threshold_abs,
            window_shift=window_shift(series),
            c_plus=c_plus,
            c_minus=c_minus,
            baseline_segment_size=segment_size,
        )
