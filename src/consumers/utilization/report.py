"""
CLI that prints one analytics report over the persisted snapshot history.

Usage:
    python -m src.consumers.utilization.report <operation> [options]
"""

import argparse
import json
import logging
import os
import sys

import structlog

from src.analytics import SnapshotStore, UtilizationAnalytics
from src.core.logger import setup_logging

from .database import UtilizationDatabase
from .models import UtilizationConsumerConfig

logger = structlog.get_logger(__name__)

OPERATIONS = (
    "history",
    "heuristic",
    "exponential",
    "holt-winters",
    "capacity",
    "anomalies",
    "seasonal",
    "persistence",
    "severity",
)


def parse_arguments(argv=None):
    """Parse command-line arguments"""
    parser = argparse.ArgumentParser(
        description="Utilization forecast and anomaly reports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
        Examples:
        # Seasonal residual anomalies with adaptive smoothing
        python -m src.consumers.utilization.report seasonal --season-length 4 --adapt

        # Holt-Winters forecast with custom smoothing
        python -m src.consumers.utilization.report holt-winters --alpha 0.4 --beta 0.2
        """,
    )
    parser.add_argument("operation", choices=OPERATIONS, help="Report to compute")

    # Operation parameters; invalid values fall back to defaults
    parser.add_argument("--limit", help="Snapshots listed by 'history' (default: 50)")
    parser.add_argument("--window", help="Snapshots considered by detectors")
    parser.add_argument("--threshold", help="Z-score threshold (default: 2.0)")
    parser.add_argument("--season-length", help="Season length in snapshots (default: 6)")
    parser.add_argument("--delta-threshold", help="Residual jump threshold (default: 0.08)")
    parser.add_argument("--alpha", help="Level smoothing factor")
    parser.add_argument("--beta", help="Trend smoothing factor")
    parser.add_argument("--gamma", help="Seasonal smoothing factor")
    parser.add_argument("--adapt", action="store_true", help="Derive smoothing from volatility")
    parser.add_argument("--k", help="CUSUM slack in standard deviations (default: 0.25)")
    parser.add_argument("--h", help="CUSUM alarm threshold in standard deviations (default: 5)")
    parser.add_argument("--variance-mode", help="population or sample (default: population)")

    # PostgreSQL settings
    parser.add_argument("--postgres-host", default=os.getenv("POSTGRES_HOST", "localhost"))
    parser.add_argument(
        "--postgres-port", type=int, default=int(os.getenv("POSTGRES_PORT", "5432"))
    )
    parser.add_argument("--postgres-db", default=os.getenv("POSTGRES_DB", "utilization_db"))
    parser.add_argument("--postgres-user", default=os.getenv("POSTGRES_USER", "analytics"))
    parser.add_argument(
        "--postgres-password", default=os.getenv("POSTGRES_PASSWORD", "analytics_password")
    )
    parser.add_argument(
        "--history-capacity",
        type=int,
        default=500,
        help="Snapshots loaded from PostgreSQL (default: 500)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=os.getenv("LOG_LEVEL", "WARNING"),
        help="Logging level (default: WARNING)",
    )

    return parser.parse_args(argv)


def run_operation(analytics: UtilizationAnalytics, args) -> dict:
    """Dispatch the requested operation and return its JSON-ready result"""
    op = args.operation

    if op == "history":
        return {"history": [s.to_dict() for s in analytics.list_history(args.limit)]}
    if op == "heuristic":
        return analytics.forecast_heuristic().to_dict()
    if op == "exponential":
        return analytics.forecast_exponential(args.alpha).to_dict()
    if op == "holt-winters":
        return analytics.forecast_holt_winters(
            args.alpha, args.beta, args.gamma, args.season_length
        ).to_dict()
    if op == "capacity":
        return analytics.capacity_forecast().to_dict()
    if op == "anomalies":
        return analytics.detect_simple_anomalies(
            args.window, args.threshold, args.variance_mode
        ).to_dict()
    if op == "seasonal":
        return analytics.detect_seasonal_anomalies(
            window=args.window,
            z_threshold=args.threshold,
            season_length=args.season_length,
            delta_threshold=args.delta_threshold,
            alpha=args.alpha,
            beta=args.beta,
            gamma=args.gamma,
            adapt=args.adapt,
            variance_mode=args.variance_mode,
        ).to_dict()
    if op == "persistence":
        return analytics.detect_persistence_anomalies(
            args.window, args.k, args.h, args.variance_mode
        ).to_dict()
    return analytics.classify_severity(
        args.window, args.threshold, args.season_length, args.variance_mode
    ).to_dict()


def main(argv=None):
    """Main entry point"""
    args = parse_arguments(argv)
    setup_logging(level=getattr(logging, args.log_level))

    try:
        config = UtilizationConsumerConfig(
            postgres_host=args.postgres_host,
            postgres_port=args.postgres_port,
            postgres_database=args.postgres_db,
            postgres_user=args.postgres_user,
            postgres_password=args.postgres_password,
            history_capacity=args.history_capacity,
        )
        db = UtilizationDatabase(config)
        try:
            store = SnapshotStore(config.history_capacity)
            store.extend(db.load_recent_snapshots(config.history_capacity))
        finally:
            db.close()

        result = run_operation(UtilizationAnalytics(store), args)
        print(json.dumps(result, indent=2))
        return 0

    except Exception as e:
        logger.error("Report failed", operation=args.operation, error=str(e), exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
