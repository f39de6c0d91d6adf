"""
Configuration and records for the utilization analytics consumer.
"""

import json
from dataclasses import dataclass, field
from typing import Any

from src.analytics.params import DEFAULT_SEASON_LENGTH, DEFAULT_SEASONAL_WINDOW, DEFAULT_Z_THRESHOLD
from src.analytics.severity import SeasonalSeverity, UtilizationSeverity
from src.analytics.store import HISTORY_CAPACITY

BOOKING_MUTATION = "booking_mutation"
METRICS_SCRAPE = "metrics_scrape"

# Snapshot origin per message type
SNAPSHOT_ORIGINS = {
    BOOKING_MUTATION: "booking-mutation",
    METRICS_SCRAPE: "metrics-scrape",
}


@dataclass
class UtilizationConsumerConfig:
    """Configuration for the utilization analytics consumer"""

    # Kafka settings
    kafka_bootstrap_servers: str = "localhost:9092"
    kafka_topic: str = "booking-events"
    kafka_group_id: str = "utilization-analytics-consumer-group"
    kafka_auto_offset_reset: str = "latest"
    max_poll_records: int = 500
    enable_auto_commit: bool = True

    # PostgreSQL settings
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_database: str = "utilization_db"
    postgres_user: str = "analytics"
    postgres_password: str = "analytics_password"

    # History
    history_capacity: int = HISTORY_CAPACITY
    restore_history: bool = True  # reload the latest snapshots from PostgreSQL on start

    # Resource capacity in minutes, e.g. {"room-a": 240}
    capacity_minutes: dict[str, float] = field(default_factory=dict)

    # Severity classification
    severity_window: int = DEFAULT_SEASONAL_WINDOW
    z_threshold: float = DEFAULT_Z_THRESHOLD
    season_length: int = DEFAULT_SEASON_LENGTH
    variance_mode: str = "population"
    min_severity: str = "watch"  # lowest severity label that gets persisted

    stats_interval_seconds: float = 30.0


@dataclass
class BookingEvent:
    """A booking mutation as published on the booking topic"""

    action: str  # created, confirmed, rescheduled, cancelled
    booking_id: str
    resource_id: str | None = None
    duration_min: float = 0.0
    timestamp: str | None = None

    @classmethod
    def from_message(cls, message: dict[str, Any]) -> "BookingEvent":
        """Parse a ``booking_mutation`` message

        Raises:
            ValueError: If the action or booking id is missing
        """
        action = str(message.get("action") or "").strip().lower()
        booking_id = message.get("booking_id")
        if not action or not booking_id:
            raise ValueError("booking_mutation requires 'action' and 'booking_id'")

        duration = message.get("duration_min") or 0
        return cls(
            action=action,
            booking_id=str(booking_id),
            resource_id=message.get("resource_id"),
            duration_min=float(duration),
            timestamp=message.get("timestamp"),
        )


@dataclass
class AnomalyRecord:
    """A classified utilization anomaly for database insertion"""

    timestamp: str
    resource_id: str
    detection_method: str  # zscore, seasonal_residual or fallback_simple
    severity: str
    severity_level: int
    z_score: float
    actual_value: float
    expected_value: float | None
    details: dict

    @classmethod
    def from_severity(
        cls, timestamp: str, severity: UtilizationSeverity | SeasonalSeverity
    ) -> "AnomalyRecord":
        if isinstance(severity, SeasonalSeverity):
            method = severity.method
            expected = severity.expected_utilization_percent
            details = {
                "residual_delta": severity.residual_delta,
                "projected_next_utilization_percent": severity.projected_next_utilization_percent,
                "expected_lower": severity.expected_lower,
                "expected_upper": severity.expected_upper,
            }
        else:
            method = "zscore"
            expected = severity.mean_utilization_percent
            details = {
                "mean_lower": severity.mean_lower,
                "mean_upper": severity.mean_upper,
            }

        return cls(
            timestamp=timestamp,
            resource_id=severity.resource_id,
            detection_method=method,
            severity=severity.severity_label,
            severity_level=severity.severity_level,
            z_score=severity.z_score,
            actual_value=severity.last_utilization_percent,
            expected_value=expected,
            details={
                "samples": severity.samples,
                "anomaly": severity.anomaly,
                "recommended_action": severity.recommended_action,
                "ci_distribution": severity.ci_distribution,
                "ci_critical": severity.ci_critical,
                **details,
            },
        )

    def to_db_dict(self) -> dict:
        """Convert to dict for database insertion"""
        return {
            "timestamp": self.timestamp,
            "resource_id": self.resource_id,
            "anomaly_type": f"{self.detection_method}_utilization",
            "severity": self.severity,
            "severity_level": self.severity_level,
            "z_score": self.z_score,
            "details": json.dumps(
                {
                    "actual_value": self.actual_value,
                    "expected_value": self.expected_value,
                    **self.details,
                }
            ),
        }
