"""
Utilization Analytics Consumer

Streams booking activity into the utilization analytics engine.

Architecture:
- Booking Ledger: confirmed booking minutes per resource
- Real-time Consumer: records a snapshot per booking mutation or metrics scrape,
  classifies severity and stores notable anomalies in PostgreSQL
- Reports: forecasts and anomaly checks over the persisted history

Usage:
    # Run the consumer
    python -m src.consumers.utilization.detect

    # Print a report
    python -m src.consumers.utilization.report seasonal --adapt
"""

from .consumer import UtilizationConsumer
from .ledger import BookingLedger, parse_capacity_map
from .models import AnomalyRecord, BookingEvent, UtilizationConsumerConfig

__all__ = [
    "AnomalyRecord",
    "BookingEvent",
    "BookingLedger",
    "UtilizationConsumer",
    "UtilizationConsumerConfig",
    "parse_capacity_map",
]
