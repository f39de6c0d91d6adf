"""
CLI for the real-time utilization analytics consumer.

Usage:
    python -m src.consumers.utilization.detect [options]
"""

import argparse
import logging
import os
import sys

import structlog

from src.core.logger import setup_logging

from .consumer import UtilizationConsumer
from .ledger import parse_capacity_map
from .models import UtilizationConsumerConfig

logger = structlog.get_logger(__name__)


def parse_arguments(argv=None):
    """Parse command-line arguments"""
    parser = argparse.ArgumentParser(
        description="Real-time utilization analytics consumer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
        Examples:
        # Basic usage
        python -m src.consumers.utilization.detect

        # Custom configuration
        python -m src.consumers.utilization.detect \\
            --kafka-servers kafka:9092 \\
            --capacity "room-a:240,room-b:480" \\
            --z-threshold 2.5 --min-severity action

        # Test run for 5 minutes
        python -m src.consumers.utilization.detect --duration 300
        """,
    )

    # Kafka settings
    parser.add_argument(
        "--kafka-servers",
        default=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
        help="Kafka bootstrap servers (default: localhost:9092)",
    )
    parser.add_argument(
        "--topic",
        default=os.getenv("KAFKA_TOPIC", "booking-events"),
        help="Kafka topic (default: booking-events)",
    )
    parser.add_argument(
        "--group-id",
        default="utilization-analytics-consumer-group",
        help="Kafka consumer group ID",
    )
    parser.add_argument(
        "--offset-reset",
        choices=["earliest", "latest"],
        default="latest",
        help="Auto offset reset (default: latest - only new messages)",
    )

    # Resources
    parser.add_argument(
        "--capacity",
        default=os.getenv("RESOURCE_CAPACITY_MINUTES", ""),
        help='Capacity minutes per resource, e.g. "room-a:240,room-b:480"',
    )
    parser.add_argument(
        "--history-capacity",
        type=int,
        default=500,
        help="Snapshots kept in memory (default: 500)",
    )
    parser.add_argument(
        "--no-restore",
        action="store_true",
        help="Start with an empty history instead of reloading it from PostgreSQL",
    )

    # Severity parameters
    parser.add_argument(
        "--window",
        type=int,
        default=60,
        help="Snapshots considered by the severity classifier (default: 60)",
    )
    parser.add_argument(
        "--z-threshold",
        type=float,
        default=2.0,
        help="Z-score threshold (default: 2.0)",
    )
    parser.add_argument(
        "--season-length",
        type=int,
        default=6,
        help="Season length in snapshots for the seasonal-residual check (default: 6)",
    )
    parser.add_argument(
        "--variance-mode",
        choices=["population", "sample"],
        default="population",
        help="Variance divisor (default: population)",
    )
    parser.add_argument(
        "--min-severity",
        choices=["informational", "watch", "action", "critical"],
        default="watch",
        help="Lowest severity stored as an anomaly (default: watch)",
    )

    # PostgreSQL settings
    parser.add_argument(
        "--postgres-host",
        default=os.getenv("POSTGRES_HOST", "localhost"),
        help="PostgreSQL host",
    )
    parser.add_argument(
        "--postgres-port",
        type=int,
        default=int(os.getenv("POSTGRES_PORT", "5432")),
        help="PostgreSQL port",
    )
    parser.add_argument(
        "--postgres-db",
        default=os.getenv("POSTGRES_DB", "utilization_db"),
        help="PostgreSQL database",
    )
    parser.add_argument(
        "--postgres-user",
        default=os.getenv("POSTGRES_USER", "analytics"),
        help="PostgreSQL user",
    )
    parser.add_argument(
        "--postgres-password",
        default=os.getenv("POSTGRES_PASSWORD", "analytics_password"),
        help="PostgreSQL password",
    )

    # Runtime settings
    parser.add_argument(
        "--duration",
        type=int,
        help="Run for N seconds then stop (default: infinite)",
    )

    # Logging
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        default=os.getenv("LOG_FORMAT") == "json",
        help="Emit JSON log lines",
    )

    return parser.parse_args(argv)


def build_config(args) -> UtilizationConsumerConfig:
    """Build configuration from arguments"""
    return UtilizationConsumerConfig(
        kafka_bootstrap_servers=args.kafka_servers,
        kafka_topic=args.topic,
        kafka_group_id=args.group_id,
        kafka_auto_offset_reset=args.offset_reset,
        postgres_host=args.postgres_host,
        postgres_port=args.postgres_port,
        postgres_database=args.postgres_db,
        postgres_user=args.postgres_user,
        postgres_password=args.postgres_password,
        history_capacity=args.history_capacity,
        restore_history=not args.no_restore,
        capacity_minutes=parse_capacity_map(args.capacity),
        severity_window=args.window,
        z_threshold=args.z_threshold,
        season_length=args.season_length,
        variance_mode=args.variance_mode,
        min_severity=args.min_severity,
    )


def main(argv=None):
    """Main entry point"""
    args = parse_arguments(argv)

    # Setup logging
    log_level = getattr(logging, args.log_level)
    setup_logging(level=log_level, json_output=args.json_logs)

    logger.info("Starting utilization analytics consumer")

    try:
        config = build_config(args)

        consumer = UtilizationConsumer(config)
        consumer.run(duration_seconds=args.duration)

        logger.info("Consumer completed successfully")
        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0

    except Exception as e:
        logger.error("Consumer failed", error=str(e), exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
