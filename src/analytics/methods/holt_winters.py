"""
Additive Holt-Winters (triple exponential smoothing) forecaster.

Workflow:
1. Seasonal init: each phase i in [0, L) starts at the mean of the samples at
   positions i, i+L, i+2L, ...
2. level_0 = x_1, trend_0 = x_2 - x_1
3. For each step t with phase s = t mod L:
       level    = alpha * (x_t - season_s) + (1 - alpha) * (level + trend)
       trend    = beta * (level - level_prev) + (1 - beta) * trend_prev
       season_s = gamma * (x_t - level) + (1 - gamma) * season_s_prev
4. Next period: level + trend + season[n mod L], clamped to [0, 1]

Series shorter than two seasons fall back to single exponential smoothing.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import structlog

from ..params import HoltWintersParams
from .base import Forecaster, ResourceResult
from .exponential import nudged_projection, smooth

logger = structlog.get_logger(__name__)


@dataclass
class HoltWintersForecast(ResourceResult):
    projected_utilization_percent: float
    level: float
    trend: float
    seasonals: list[float]
    last_utilization_percent: float
    alpha: float
    beta: float
    gamma: float
    season_length: int
    method: str = field(default="holt_winters_additive", init=False)


@dataclass
class FallbackForecast(ResourceResult):
    """Exponential smoothing result used when there is less than two seasons of data"""

    last_utilization_percent: float
    smoothed_utilization_percent: float
    projected_utilization_percent: float
    alpha: float
    method: str = field(default="fallback", init=False)


@dataclass
class Decomposition:
    """Final Holt-Winters state plus the one-step-ahead residual of every sample"""

    level: float
    trend: float
    seasonals: list[float]
    residuals: list[float]

    def projection(self, steps_seen: int) -> float:
        """Unclamped next-period value after ``steps_seen`` samples"""
        return self.level + self.trend + self.seasonals[steps_seen % len(self.seasonals)]


def initial_seasonals(series: Sequence[float], season_length: int) -> list[float]:
    seasonals = []
    for phase in range(season_length):
        members = series[phase::season_length]
        seasonals.append(sum(members) / len(members) if members else 0.0)
    return seasonals


def decompose(
    series: Sequence[float], season_length: int, alpha: float, beta: float, gamma: float
) -> Decomposition:
    """Run the additive recurrence over a series of at least two samples

    The residual at step t is x_t minus the value expected from the state
    *before* that step is applied (level + trend + season of the phase).
    """
    seasonals = initial_seasonals(series, season_length)
    level = series[0]
    trend = series[1] - series[0]
    residuals = []

    for t, value in enumerate(series):
        phase = t % season_length
        last_level, last_trend, last_season = level, trend, seasonals[phase]

        residuals.append(value - (last_level + last_trend + last_season))

        level = alpha * (value - last_season) + (1 - alpha) * (last_level + last_trend)
        trend = beta * (level - last_level) + (1 - beta) * last_trend
        seasonals[phase] = gamma * (value - level) + (1 - gamma) * last_season

    return Decomposition(level=level, trend=trend, seasonals=seasonals, residuals=residuals)


class HoltWintersForecaster(Forecaster):
    """Level + trend + seasonal smoothing with an exponential-smoothing fallback"""

    def __init__(self, params: HoltWintersParams | None = None):
        self.params = params or HoltWintersParams()

        logger.debug(
            "Holt-Winters forecaster initialized",
            alpha=self.params.alpha,
            beta=self.params.beta,
            gamma=self.params.gamma,
            season_length=self.params.season_length,
        )

    @property
    def name(self) -> str:
        return "holt_winters"

    @property
    def history_window(self) -> int:
        return self.params.history_window

    @property
    def min_samples(self) -> int:
        return 2 * self.params.season_length

    def get_config(self) -> dict[str, Any]:
        return {
            "alpha": self.params.alpha,
            "beta": self.params.beta,
            "gamma": self.params.gamma,
            "season_length": self.params.season_length,
        }

    def forecast(
        self, resource_id: str, series: Sequence[float]
    ) -> HoltWintersForecast | FallbackForecast:
        p = self.params
        if len(series) < self.min_samples:
            return self._fallback(resource_id, series)

        state = decompose(series, p.season_length, p.alpha, p.beta, p.gamma)
        projected = max(0.0, min(state.projection(len(series)), 1.0))

        return HoltWintersForecast(
            resource_id=resource_id,
            samples=len(series),
            projected_utilization_percent=projected,
            level=state.level,
            trend=state.trend,
            seasonals=state.seasonals,
            last_utilization_percent=series[-1],
            alpha=p.alpha,
            beta=p.beta,
            gamma=p.gamma,
            season_length=p.season_length,
        )

    def _fallback(self, resource_id: str, series: Sequence[float]) -> FallbackForecast:
        if len(series) == 0:
            return FallbackForecast(resource_id, 0, 0.0, 0.0, 0.0, self.params.alpha)

        smoothed = smooth(series, self.params.alpha)
        logger.debug(
            "Insufficient samples for Holt-Winters, using smoothing fallback",
            resource_id=resource_id,
            samples=len(series),
            required=self.min_samples,
        )
        return FallbackForecast(
            resource_id=resource_id,
            samples=len(series),
            last_utilization_percent=series[-1],
            smoothed_utilization_percent=smoothed,
            projected_utilization_percent=nudged_projection(series[-1], smoothed),
            alpha=self.params.alpha,
        )
