"""
Naive trend projection, kept as a baseline to compare smoothing methods against.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from .. import stats
from ..params import HEURISTIC_WINDOW
from .base import Forecaster, ResourceResult

RISING_STEP = 0.05


@dataclass
class HeuristicForecast(ResourceResult):
    current_utilization_percent: float
    average_utilization_percent: float
    projected_utilization_percent: float
    method: str = field(default="heuristic", init=False)


class HeuristicForecaster(Forecaster):
    """Rising series (last above mean) get a fixed bump, flat ones keep the mean"""

    def __init__(self, window: int = HEURISTIC_WINDOW):
        self.window = window

    @property
    def name(self) -> str:
        return "heuristic"

    @property
    def history_window(self) -> int:
        return self.window

    def get_config(self) -> dict[str, Any]:
        return {"window": self.window}

    def forecast(self, resource_id: str, series: Sequence[float]) -> HeuristicForecast:
        if len(series) == 0:
            return HeuristicForecast(resource_id, 0, 0.0, 0.0, 0.0)

        average = stats.mean(series)
        last = series[-1]
        projected = min(last + RISING_STEP, 1.0) if last > average else average

        return HeuristicForecast(
            resource_id=resource_id,
            samples=len(series),
            current_utilization_percent=last,
            average_utilization_percent=average,
            projected_utilization_percent=projected,
        )
