"""
Resource Utilization Analytics

Forecasting and anomaly detection over a bounded history of per-resource
utilization snapshots (one sample per scheduled resource, e.g. an instructor or
a room).

Architecture:
- Snapshot Store: capacity-bounded, lock-protected history of snapshots
- Statistics Kernel: mean/variance, t/z critical values, confidence intervals
- Methods: heuristic, exponential and Holt-Winters forecasters; z-score,
  seasonal-residual and CUSUM detectors (pluggable via the registry)
- Severity: five-tier classification with recommended actions

Usage:
    analytics = UtilizationAnalytics()
    analytics.record_snapshot("metrics-scrape", {"room-a": 120}, {"room-a": 240})
    report = analytics.detect_seasonal_anomalies(season_length=6, adapt=True)
"""

from .engine import AnalyticsReport, CapacityForecastReport, SeverityReport, UtilizationAnalytics
from .models import ResourceUtilization, UtilizationSnapshot, VarianceMode
from .severity import SeverityLevel
from .store import SnapshotStore

__all__ = [
    "AnalyticsReport",
    "CapacityForecastReport",
    "ResourceUtilization",
    "SeverityLevel",
    "SeverityReport",
    "SnapshotStore",
    "UtilizationAnalytics",
    "UtilizationSnapshot",
    "VarianceMode",
]
