"""
Forecasting and anomaly detection methods registry and factory.
"""

from .base import AnomalyDetector, Forecaster, ResourceResult, UtilizationMethod
from .cusum import CusumDetector, PersistenceAnomaly
from .exponential import ExponentialForecast, ExponentialSmoothingForecaster
from .heuristic import HeuristicForecast, HeuristicForecaster
from .holt_winters import FallbackForecast, HoltWintersForecast, HoltWintersForecaster
from .seasonal_residual import (
    FallbackSimpleAnomaly,
    SeasonalResidualAnomaly,
    SeasonalResidualDetector,
)
from .zscore import UtilizationAnomaly, ZScoreDetector

# Registry of available methods
FORECASTER_REGISTRY = {
    "heuristic": HeuristicForecaster,
    "exponential": ExponentialSmoothingForecaster,
    "holt_winters": HoltWintersForecaster,
}

DETECTOR_REGISTRY = {
    "zscore": ZScoreDetector,
    "seasonal_residual": SeasonalResidualDetector,
    "cusum": CusumDetector,
}

METHOD_REGISTRY = {**FORECASTER_REGISTRY, **DETECTOR_REGISTRY}


def get_method(method_name: str, params=None) -> UtilizationMethod:
    """Factory to create a forecaster or detector

    Args:
        method_name: Name of the method (e.g., 'holt_winters', 'cusum')
        params: Resolved parameter dataclass for the method, or None for defaults

    Returns:
        Instance of the method

    Raises:
        ValueError: If method_name is not registered
    """
    if method_name not in METHOD_REGISTRY:
        available = ", ".join(METHOD_REGISTRY.keys())
        raise ValueError(f"Unknown method '{method_name}'. Available methods: {available}")

    method_class = METHOD_REGISTRY[method_name]
    if method_class is HeuristicForecaster or params is None:
        return method_class()
    return method_class(params)


def list_methods() -> list[str]:
    """List all available methods"""
    return list(METHOD_REGISTRY.keys())


__all__ = [
    "AnomalyDetector",
    "CusumDetector",
    "DETECTOR_REGISTRY",
    "ExponentialForecast",
    "ExponentialSmoothingForecaster",
    "FORECASTER_REGISTRY",
    "FallbackForecast",
    "FallbackSimpleAnomaly",
    "Forecaster",
    "HeuristicForecast",
    "HeuristicForecaster",
    "HoltWintersForecast",
    "HoltWintersForecaster",
    "METHOD_REGISTRY",
    "PersistenceAnomaly",
    "ResourceResult",
    "SeasonalResidualAnomaly",
    "SeasonalResidualDetector",
    "UtilizationAnomaly",
    "UtilizationMethod",
    "ZScoreDetector",
    "get_method",
    "list_methods",
]
