"""
Severity classification of detector outputs.

Pure mapping layer: z-scores (and, for seasonal residuals, the absolute
residual jump) are bucketed into five tiers, each with a recommended action.
Seasonal severity takes the worse of the two tiers so an abrupt but
moderate-z deviation still escalates.
"""

from dataclasses import asdict, dataclass
from enum import IntEnum

from .methods.seasonal_residual import FallbackSimpleAnomaly, SeasonalResidualAnomaly
from .methods.zscore import UtilizationAnomaly


class SeverityLevel(IntEnum):
    NORMAL = 0
    INFORMATIONAL = 1
    WATCH = 2
    ACTION = 3
    CRITICAL = 4

    @property
    def label(self) -> str:
        return self.name.lower()

    @property
    def recommended_action(self) -> str:
        return RECOMMENDED_ACTIONS[self]

    @classmethod
    def from_label(cls, label: str) -> "SeverityLevel":
        return cls[label.strip().upper()]


RECOMMENDED_ACTIONS = {
    SeverityLevel.NORMAL: "No action; continue monitoring.",
    SeverityLevel.INFORMATIONAL: "Log & observe; verify if trend persists.",
    SeverityLevel.WATCH: "Review capacity trends; prepare mitigation.",
    SeverityLevel.ACTION: "Initiate capacity adjustment or stakeholder notification.",
    SeverityLevel.CRITICAL: "Escalate immediately; trigger alerting & contingency plan.",
}

# Entry bounds of informational/watch/action/critical; the action tier includes its upper bound
Z_TIERS = (1.8, 2.5, 3.5, 5.0)
RESIDUAL_DELTA_TIERS = (0.05, 0.07, 0.10, 0.15)


def _tier(value: float, bounds: tuple[float, float, float, float]) -> SeverityLevel:
    info, watch, action, critical = bounds
    if value < info:
        return SeverityLevel.NORMAL
    if value < watch:
        return SeverityLevel.INFORMATIONAL
    if value < action:
        return SeverityLevel.WATCH
    if value <= critical:
        return SeverityLevel.ACTION
    return SeverityLevel.CRITICAL


def classify_z(z_score: float) -> SeverityLevel:
    return _tier(abs(z_score), Z_TIERS)


def classify_residual_delta(residual_delta: float) -> SeverityLevel:
    return _tier(residual_delta, RESIDUAL_DELTA_TIERS)


@dataclass
class UtilizationSeverity:
    resource_id: str
    samples: int
    z_score: float
    anomaly: bool
    severity_level: int
    severity_label: str
    recommended_action: str
    last_utilization_percent: float
    mean_utilization_percent: float
    ci_distribution: str
    ci_critical: float
    mean_lower: float
    mean_upper: float
    type: str = "utilization"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class SeasonalSeverity:
    resource_id: str
    samples: int
    method: str
    z_score: float
    residual_delta: float
    anomaly: bool
    severity_level: int
    severity_label: str
    recommended_action: str
    last_utilization_percent: float
    expected_utilization_percent: float
    projected_next_utilization_percent: float | None
    residual_delta_threshold: float | None
    ci_distribution: str
    ci_critical: float
    expected_lower: float
    expected_upper: float
    type: str = "seasonal_residual"

    def to_dict(self) -> dict:
        return asdict(self)


def classify_utilization(result: UtilizationAnomaly) -> UtilizationSeverity:
    level = classify_z(result.z_score)
    return UtilizationSeverity(
        resource_id=result.resource_id,
        samples=result.samples,
        z_score=result.z_score,
        anomaly=result.anomaly,
        severity_level=int(level),
        severity_label=level.label,
        recommended_action=level.recommended_action,
        last_utilization_percent=result.last_utilization_percent,
        mean_utilization_percent=result.mean_utilization_percent,
        ci_distribution=result.ci_distribution,
        ci_critical=result.ci_critical,
        mean_lower=result.mean_lower,
        mean_upper=result.mean_upper,
    )


def classify_seasonal(result: SeasonalResidualAnomaly | FallbackSimpleAnomaly) -> SeasonalSeverity:
    level = max(classify_z(result.z_score), classify_residual_delta(result.residual_delta))

    projected = delta_threshold = None
    if isinstance(result, SeasonalResidualAnomaly):
        projected = result.projected_next_utilization_percent
        delta_threshold = result.residual_delta_threshold

    return SeasonalSeverity(
        resource_id=result.resource_id,
        samples=result.samples,
        method=result.method,
        z_score=result.z_score,
        residual_delta=result.residual_delta,
        anomaly=result.anomaly,
        severity_level=int(level),
        severity_label=level.label,
        recommended_action=level.recommended_action,
        last_utilization_percent=result.last_utilization_percent,
        expected_utilization_percent=result.expected_utilization_percent,
        projected_next_utilization_percent=projected,
        residual_delta_threshold=delta_threshold,
        ci_distribution=result.ci_distribution,
        ci_critical=result.ci_critical,
        expected_lower=result.expected_lower,
        expected_upper=result.expected_upper,
    )


def severity_legend() -> list[dict]:
    return [
        {"level": int(level), "label": level.label, "action": level.recommended_action}
        for level in SeverityLevel
    ]
