"""
Real-time utilization analytics consumer.

Consumes booking mutations and metrics scrapes from Kafka, records a
utilization snapshot for each, and stores severity-classified anomalies.
"""

import json
import time
from typing import Any

import structlog
from kafka import KafkaConsumer

from src.analytics import SeverityLevel, UtilizationAnalytics
from src.analytics.store import SnapshotStore

from .database import UtilizationDatabase
from .ledger import BookingLedger
from .models import (
    BOOKING_MUTATION,
    SNAPSHOT_ORIGINS,
    AnomalyRecord,
    BookingEvent,
    UtilizationConsumerConfig,
)

logger = structlog.get_logger(__name__)


class UtilizationConsumer:
    """Snapshot recording and anomaly classification consumer"""

    def __init__(self, config: UtilizationConsumerConfig):
        self.config = config
        self.min_severity = SeverityLevel.from_label(config.min_severity)

        # Initialize database
        self.db = UtilizationDatabase(config)
        if not self.db.check_health():
            raise RuntimeError("Database health check failed")
        self.db.ensure_tables_exist()

        # Initialize analytics engine
        self.analytics = UtilizationAnalytics(SnapshotStore(config.history_capacity))
        if config.restore_history:
            restored = self.analytics.store.extend(
                self.db.load_recent_snapshots(config.history_capacity)
            )
            logger.info("Snapshot history restored", snapshots=restored)

        self.ledger = BookingLedger()

        # Initialize Kafka consumer
        try:
            self.consumer = KafkaConsumer(
                config.kafka_topic,
                bootstrap_servers=config.kafka_bootstrap_servers,
                group_id=config.kafka_group_id,
                auto_offset_reset=config.kafka_auto_offset_reset,
                enable_auto_commit=config.enable_auto_commit,
                max_poll_records=config.max_poll_records,
                value_deserializer=lambda m: json.loads(m.decode("utf-8")),
            )
            logger.info(
                "Kafka consumer initialized",
                bootstrap_servers=config.kafka_bootstrap_servers,
                topic=config.kafka_topic,
                group_id=config.kafka_group_id,
            )
        except Exception as e:
            logger.error("Failed to initialize Kafka consumer", error=str(e))
            raise

        self.stats = {
            "total_consumed": 0,
            "snapshots_recorded": 0,
            "anomalies_detected": 0,
            "ignored": 0,
            "parse_errors": 0,
        }

        logger.info(
            "Consumer initialized",
            capacity_resources=len(config.capacity_minutes),
            min_severity=self.min_severity.label,
        )

    def run(self, duration_seconds: int = None):
        """Run the consumer

        Args:
            duration_seconds: Optional duration in seconds. If None, runs indefinitely.
        """
        logger.info(
            "Starting utilization analytics consumer",
            topic=self.config.kafka_topic,
            duration=duration_seconds if duration_seconds else "indefinite",
        )

        start_time = time.time()
        last_log_time = start_time

        try:
            for message in self.consumer:
                self.stats["total_consumed"] += 1

                self._process_message(message.value)

                elapsed = time.time() - start_time
                if time.time() - last_log_time >= self.config.stats_interval_seconds:
                    rate = self.stats["total_consumed"] / elapsed if elapsed > 0 else 0
                    logger.info(
                        "Consumer stats",
                        total_consumed=self.stats["total_consumed"],
                        snapshots_recorded=self.stats["snapshots_recorded"],
                        anomalies_detected=self.stats["anomalies_detected"],
                        ignored=self.stats["ignored"],
                        parse_errors=self.stats["parse_errors"],
                        history_size=len(self.analytics.store),
                        rate_per_sec=round(rate, 1),
                        elapsed_sec=round(elapsed, 1),
                    )
                    last_log_time = time.time()

                # Check duration limit
                if duration_seconds and elapsed >= duration_seconds:
                    logger.info("Duration limit reached", duration_seconds=duration_seconds)
                    break

        except KeyboardInterrupt:
            logger.info("Received interrupt signal, stopping consumer")

        except Exception as e:
            logger.error("Consumer error", error=str(e), exc_info=True)
            raise

        finally:
            self.consumer.close()
            self.db.close()

            elapsed = time.time() - start_time
            rate = self.stats["total_consumed"] / elapsed if elapsed > 0 else 0

            logger.info(
                "Consumer stopped",
                total_consumed=self.stats["total_consumed"],
                snapshots_recorded=self.stats["snapshots_recorded"],
                anomalies_detected=self.stats["anomalies_detected"],
                elapsed_sec=round(elapsed, 1),
                avg_rate_per_sec=round(rate, 1),
            )

    def _process_message(self, message: dict[str, Any]):
        """Process a single Kafka message"""
        try:
            msg_type = message.get("type")
            if msg_type not in SNAPSHOT_ORIGINS:
                self.stats["ignored"] += 1
                return

            if msg_type == BOOKING_MUTATION:
                self.ledger.apply(BookingEvent.from_message(message))

            self._record_and_classify(SNAPSHOT_ORIGINS[msg_type])

        except Exception as e:
            logger.error("Failed to process message", error=str(e), message=message)
            self.stats["parse_errors"] += 1

    def _record_and_classify(self, origin: str):
        """Record a snapshot from the ledger, persist it and store notable anomalies"""
        snapshot = self.analytics.record_snapshot(
            origin,
            self.ledger.minutes_per_resource(),
            self.config.capacity_minutes,
        )
        self.stats["snapshots_recorded"] += 1
        self.db.insert_snapshot(snapshot)

        report = self.analytics.classify_severity(
            window=self.config.severity_window,
            threshold=self.config.z_threshold,
            season_length=self.config.season_length,
            variance_mode=self.config.variance_mode,
        )

        records = [
            AnomalyRecord.from_severity(snapshot.timestamp, severity)
            for severity in [*report.utilization_severity, *report.seasonal_severity]
            if severity.severity_level >= self.min_severity
        ]
        if not records:
            return

        self.stats["anomalies_detected"] += len(records)
        self.db.insert_anomalies(records)

        for record in records:
            logger.info(
                "Anomaly detected",
                resource_id=record.resource_id,
                method=record.detection_method,
                severity=record.severity,
                z_score=round(record.z_score, 3),
                actual=round(record.actual_value, 3),
                expected=round(record.expected_value, 3)
                if record.expected_value is not None
                else None,
            )
