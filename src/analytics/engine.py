"""
Utilization analytics facade.

Exposes the engine's logical operations over an injectable SnapshotStore:
recording and listing snapshots, three forecasters, three detectors and the
severity classifier. Every operation resolves its raw arguments once into a
parameter dataclass (clamp-to-default, never raising) and then works on a
consistent copy of the history.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import structlog

from . import stats
from .methods import (
    CusumDetector,
    ExponentialSmoothingForecaster,
    HeuristicForecaster,
    HoltWintersForecaster,
    ResourceResult,
    SeasonalResidualDetector,
    ZScoreDetector,
)
from .methods.base import AnomalyDetector, Forecaster
from .models import UtilizationSnapshot
from .params import (
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_SEASONAL_WINDOW,
    ExponentialParams,
    HoltWintersParams,
    PersistenceParams,
    SeasonalAnomalyParams,
    SimpleAnomalyParams,
    window_or_default,
)
from .severity import (
    SeasonalSeverity,
    UtilizationSeverity,
    classify_seasonal,
    classify_utilization,
    severity_legend,
)
from .store import SnapshotStore, resource_series

logger = structlog.get_logger(__name__)

CAPACITY_FORECAST_ALPHA = 0.6


@dataclass
class AnalyticsReport:
    """Results of one forecaster or detector run across all resources"""

    kind: str  # "forecast" or "anomalies"
    generated_at: str
    parameters: dict[str, Any]
    results: list[ResourceResult]

    def for_resource(self, resource_id: str) -> ResourceResult | None:
        return next((r for r in self.results if r.resource_id == resource_id), None)

    def to_dict(self) -> dict:
        return {
            "generated_at": self.generated_at,
            **self.parameters,
            self.kind: [result.to_dict() for result in self.results],
        }


@dataclass
class CapacityForecastReport:
    heuristic: AnalyticsReport
    exponential: AnalyticsReport
    holt_winters: AnalyticsReport

    def to_dict(self) -> dict:
        return {
            "heuristic": self.heuristic.to_dict(),
            "exponential": self.exponential.to_dict(),
            "holt_winters": self.holt_winters.to_dict(),
        }


@dataclass
class SeverityReport:
    generated_at: str
    parameters: dict[str, Any]
    utilization_severity: list[UtilizationSeverity]
    seasonal_severity: list[SeasonalSeverity]

    def to_dict(self) -> dict:
        return {
            "generated_at": self.generated_at,
            **self.parameters,
            "utilization_severity": [s.to_dict() for s in self.utilization_severity],
            "seasonal_severity": [s.to_dict() for s in self.seasonal_severity],
            "severity_legend": severity_legend(),
        }


class UtilizationAnalytics:
    """Forecasts and anomaly checks over a bounded utilization history"""

    def __init__(
        self,
        store: SnapshotStore | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.store = store if store is not None else SnapshotStore()
        self._clock = clock or (lambda: datetime.now(UTC))

    # Snapshots

    def record_snapshot(
        self,
        origin: str | None,
        booked_minutes: Mapping[str, float],
        capacity_minutes: Mapping[str, float] | None = None,
        resource_ids: Iterable[str] = (),
    ) -> UtilizationSnapshot:
        """Append a snapshot computed from per-resource booked/capacity minutes"""
        return self.store.record(
            origin, booked_minutes, capacity_minutes, resource_ids, timestamp=self._clock()
        )

    def list_history(self, limit: Any = None) -> list[UtilizationSnapshot]:
        """Most recent ``limit`` snapshots (default 50), oldest first"""
        return self.store.recent(window_or_default(limit, DEFAULT_HISTORY_LIMIT))

    # Forecasts

    def forecast_heuristic(self) -> AnalyticsReport:
        return self._forecast(HeuristicForecaster(), {})

    def forecast_exponential(self, alpha: Any = None) -> AnalyticsReport:
        params = ExponentialParams.resolve(alpha)
        return self._forecast(ExponentialSmoothingForecaster(params), {"alpha": params.alpha})

    def forecast_holt_winters(
        self, alpha: Any = None, beta: Any = None, gamma: Any = None, season_length: Any = None
    ) -> AnalyticsReport:
        params = HoltWintersParams.resolve(alpha, beta, gamma, season_length)
        forecaster = HoltWintersForecaster(params)
        return self._forecast(forecaster, forecaster.get_config())

    def capacity_forecast(self) -> CapacityForecastReport:
        """Heuristic, exponential (alpha 0.6) and default Holt-Winters forecasts together"""
        return CapacityForecastReport(
            heuristic=self.forecast_heuristic(),
            exponential=self.forecast_exponential(CAPACITY_FORECAST_ALPHA),
            holt_winters=self.forecast_holt_winters(),
        )

    # Anomalies

    def detect_simple_anomalies(
        self, window: Any = None, z_threshold: Any = None, variance_mode: Any = None
    ) -> AnalyticsReport:
        params = SimpleAnomalyParams.resolve(window, z_threshold, variance_mode)
        return self._detect(
            ZScoreDetector(params),
            {
                "threshold": params.z_threshold,
                "variance_mode": params.variance_mode.value,
                "ci_level": stats.CI_LEVEL,
            },
        )

    def detect_seasonal_anomalies(
        self,
        window: Any = None,
        z_threshold: Any = None,
        season_length: Any = None,
        delta_threshold: Any = None,
        alpha: Any = None,
        beta: Any = None,
        gamma: Any = None,
        adapt: Any = False,
        variance_mode: Any = None,
    ) -> AnalyticsReport:
        params = SeasonalAnomalyParams.resolve(
            window,
            z_threshold,
            season_length,
            delta_threshold,
            alpha,
            beta,
            gamma,
            adapt,
            variance_mode,
        )
        return self._detect(SeasonalResidualDetector(params), self._seasonal_parameters(params))

    def detect_persistence_anomalies(
        self, window: Any = None, k: Any = None, h: Any = None, variance_mode: Any = None
    ) -> AnalyticsReport:
        params = PersistenceParams.resolve(window, k, h, variance_mode)
        return self._detect(
            CusumDetector(params),
            {
                "window_size": params.window,
                "k": params.k,
                "h": params.h,
                "variance_mode": params.variance_mode.value,
            },
        )

    def classify_severity(
        self,
        window: Any = None,
        threshold: Any = None,
        season_length: Any = None,
        variance_mode: Any = None,
    ) -> SeverityReport:
        """Severity tiers for the simple and seasonal-residual detectors (adaptation off)"""
        window_size = window_or_default(window, DEFAULT_SEASONAL_WINDOW)
        simple = SimpleAnomalyParams.resolve(window_size, threshold, variance_mode)
        seasonal = SeasonalAnomalyParams.resolve(
            window_size, threshold, season_length, variance_mode=variance_mode
        )

        # One copy of the history for both detectors
        sequences = resource_series(self.store.recent(window_size))
        utilization = ZScoreDetector(simple).detect_all(sequences)
        residual = SeasonalResidualDetector(seasonal).detect_all(sequences)

        report = SeverityReport(
            generated_at=self._now(),
            parameters={
                "window_size": window_size,
                "threshold": simple.z_threshold,
                "season_length": seasonal.season_length,
                "variance_mode": simple.variance_mode.value,
            },
            utilization_severity=[classify_utilization(r) for r in utilization],
            seasonal_severity=[classify_seasonal(r) for r in residual],
        )
        logger.debug(
            "Severity classified",
            utilization=len(report.utilization_severity),
            seasonal=len(report.seasonal_severity),
        )
        return report

    # Helpers

    def _forecast(self, forecaster: Forecaster, parameters: dict[str, Any]) -> AnalyticsReport:
        sequences = self.store.series(forecaster.history_window)
        results = forecaster.forecast_all(sequences)
        logger.debug("Forecast computed", method=forecaster.name, resources=len(results))
        return AnalyticsReport("forecast", self._now(), parameters, results)

    def _detect(self, detector: AnomalyDetector, parameters: dict[str, Any]) -> AnalyticsReport:
        sequences = self.store.series(detector.history_window)
        results = detector.detect_all(sequences)
        logger.debug(
            "Detection computed",
            method=detector.name,
            resources=len(sequences),
            evaluated=len(results),
        )
        return AnalyticsReport("anomalies", self._now(), parameters, results)

    @staticmethod
    def _seasonal_parameters(params: SeasonalAnomalyParams) -> dict[str, Any]:
        return {
            "threshold": params.z_threshold,
            "season_length": params.season_length,
            "residual_delta_threshold": params.delta_threshold,
            "alpha": params.alpha,
            "beta": params.beta,
            "gamma": params.gamma,
            "adaptive": params.adapt,
            "variance_mode": params.variance_mode.value,
            "ci_level": stats.CI_LEVEL,
        }

    def _now(self) -> str:
        return self._clock().isoformat()
