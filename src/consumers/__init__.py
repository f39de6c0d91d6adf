"""
Kafka consumers for booking and utilization analytics.
"""

# Utilization consumer (Kafka → analytics engine → PostgreSQL)
from .utilization import UtilizationConsumer, UtilizationConsumerConfig

__all__ = ["UtilizationConsumer", "UtilizationConsumerConfig"]
