"""
Single exponential smoothing forecaster.

    S_1 = x_1
    S_t = alpha * x_t + (1 - alpha) * S_{t-1}

The projection is S_n, nudged upward when the latest sample runs clearly
ahead of the smoothed level.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from .. import stats
from ..params import EXPONENTIAL_WINDOW, ExponentialParams
from .base import Forecaster, ResourceResult

RISING_GAP = 0.05  # last - smoothed above this counts as a rising trend
RISING_NUDGE = 0.025


@dataclass
class ExponentialForecast(ResourceResult):
    average_utilization_percent: float
    last_utilization_percent: float
    smoothed_utilization_percent: float
    projected_utilization_percent: float
    alpha: float
    method: str = field(default="exponential_smoothing", init=False)


def smooth(series: Sequence[float], alpha: float) -> float:
    """Final smoothed level S_n of a non-empty series"""
    level = series[0]
    for value in series[1:]:
        level = alpha * value + (1 - alpha) * level
    return level


def nudged_projection(last: float, smoothed: float) -> float:
    if last - smoothed > RISING_GAP:
        return min(smoothed + RISING_NUDGE, 1.0)
    return smoothed


class ExponentialSmoothingForecaster(Forecaster):
    """Level-only smoothing with a small upward nudge on rising trends"""

    def __init__(self, params: ExponentialParams | None = None, window: int = EXPONENTIAL_WINDOW):
        self.params = params or ExponentialParams()
        self.window = window

    @property
    def name(self) -> str:
        return "exponential"

    @property
    def history_window(self) -> int:
        return self.window

    def get_config(self) -> dict[str, Any]:
        return {"alpha": self.params.alpha, "window": self.window}

    def forecast(self, resource_id: str, series: Sequence[float]) -> ExponentialForecast:
        alpha = self.params.alpha
        if len(series) == 0:
            return ExponentialForecast(resource_id, 0, 0.0, 0.0, 0.0, 0.0, alpha)

        smoothed = smooth(series, alpha)
        last = series[-1]

        return ExponentialForecast(
            resource_id=resource_id,
            samples=len(series),
            average_utilization_percent=stats.mean(series),
            last_utilization_percent=last,
            smoothed_utilization_percent=smoothed,
            projected_utilization_percent=nudged_projection(last, smoothed),
            alpha=alpha,
        )
