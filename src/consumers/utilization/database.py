"""
PostgreSQL operations for the utilization analytics consumer.

Handles:
- Persisting utilization snapshots (JSONB per-resource breakdown)
- Restoring recent snapshot history on start
- Inserting classified anomalies
"""

from datetime import datetime

import psycopg2.extras
import structlog

from src.analytics.models import UtilizationSnapshot
from src.core.database import PostgresConnection

from .models import AnomalyRecord, UtilizationConsumerConfig

logger = structlog.get_logger(__name__)


class UtilizationDatabase(PostgresConnection):
    """Snapshot and anomaly storage"""

    def __init__(self, config: UtilizationConsumerConfig):
        super().__init__(
            host=config.postgres_host,
            port=config.postgres_port,
            database=config.postgres_database,
            user=config.postgres_user,
            password=config.postgres_password,
        )

    def ensure_tables_exist(self) -> bool:
        """Create the snapshot and anomaly tables if they don't exist"""
        query = """
            CREATE TABLE IF NOT EXISTS utilization_snapshots (
                id SERIAL PRIMARY KEY,
                timestamp TIMESTAMPTZ NOT NULL,
                origin VARCHAR(50) NOT NULL,
                per_resource JSONB NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_utilization_snapshots_timestamp
            ON utilization_snapshots(timestamp DESC);

            CREATE TABLE IF NOT EXISTS utilization_anomalies (
                id SERIAL PRIMARY KEY,
                timestamp TIMESTAMPTZ NOT NULL,
                resource_id VARCHAR(100) NOT NULL,
                anomaly_type VARCHAR(50) NOT NULL,
                severity VARCHAR(20) NOT NULL,
                severity_level SMALLINT NOT NULL,
                z_score DOUBLE PRECISION,
                details JSONB
            );
        """

        if not self.execute_query(query):
            logger.error("Failed to create utilization tables")
            return False
        logger.info("Ensured utilization tables exist")
        return True

    def insert_snapshot(self, snapshot: UtilizationSnapshot) -> bool:
        """Insert one utilization snapshot

        Returns:
            True if successful, False otherwise
        """
        query = """
            INSERT INTO utilization_snapshots (timestamp, origin, per_resource)
            VALUES (%(timestamp)s, %(origin)s, %(per_resource)s)
        """
        data = snapshot.to_dict()
        data["per_resource"] = psycopg2.extras.Json(data["per_resource"])

        try:
            with self.get_cursor() as cursor:
                cursor.execute(query, data)
                logger.debug(
                    "Snapshot inserted",
                    origin=snapshot.origin,
                    resources=len(snapshot.per_resource),
                )
                return True
        except Exception as e:
            logger.error("Failed to insert snapshot", origin=snapshot.origin, error=str(e))
            return False

    def load_recent_snapshots(self, limit: int) -> list[UtilizationSnapshot]:
        """Load the most recent snapshots, oldest first

        Args:
            limit: Maximum number of snapshots

        Returns:
            List of snapshots (empty on failure)
        """
        query = """
            SELECT timestamp, origin, per_resource
            FROM utilization_snapshots
            ORDER BY timestamp DESC, id DESC
            LIMIT %s
        """

        try:
            with self.get_cursor() as cursor:
                cursor.execute(query, (limit,))
                rows = cursor.fetchall()
        except Exception as e:
            logger.error("Failed to load snapshots", limit=limit, error=str(e))
            return []

        snapshots = [
            UtilizationSnapshot.from_dict(
                {
                    "timestamp": ts.isoformat() if isinstance(ts, datetime) else ts,
                    "origin": origin,
                    "per_resource": per_resource,
                }
            )
            for ts, origin, per_resource in reversed(rows)
        ]
        logger.debug("Loaded snapshots", limit=limit, rows=len(snapshots))
        return snapshots

    def insert_anomalies(self, anomalies: list[AnomalyRecord]) -> int:
        """Batch insert classified anomalies

        Returns:
            Number of inserted rows
        """
        if not anomalies:
            return 0

        query = """
            INSERT INTO utilization_anomalies (
                timestamp, resource_id, anomaly_type, severity,
                severity_level, z_score, details
            ) VALUES (
                %(timestamp)s, %(resource_id)s, %(anomaly_type)s, %(severity)s,
                %(severity_level)s, %(z_score)s, %(details)s
            )
        """
        inserted = 0
        try:
            with self.get_cursor() as cursor:
                psycopg2.extras.execute_batch(
                    cursor, query, [a.to_db_dict() for a in anomalies], page_size=100
                )
                inserted = len(anomalies)
        except Exception as e:
            logger.error("Failed to insert anomalies", count=len(anomalies), error=str(e))
        return inserted
