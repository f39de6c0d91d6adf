"""
Pytest configuration and shared fixtures.
"""

from datetime import UTC, datetime, timedelta

import pytest

from src.analytics import (
    ResourceUtilization,
    SnapshotStore,
    UtilizationAnalytics,
    UtilizationSnapshot,
)
from src.consumers.utilization.models import UtilizationConsumerConfig

FIXED_NOW = datetime(2025, 10, 2, 12, 0, tzinfo=UTC)
TEST_CAPACITY_MINUTES = 240


def build_snapshots(sequences: dict[str, list[float]], end: datetime = FIXED_NOW):
    """One snapshot per index, one minute apart, with the given utilization values

    Shorter sequences are aligned to the end, so a resource only appears in the
    most recent snapshots (sparse history).
    """
    length = max((len(seq) for seq in sequences.values()), default=0)
    snapshots = []
    for i in range(length):
        per_resource = {}
        for rid, seq in sequences.items():
            offset = i - (length - len(seq))
            if offset < 0:
                continue
            value = seq[offset]
            per_resource[rid] = ResourceUtilization(
                booked_minutes=round(value * TEST_CAPACITY_MINUTES),
                capacity_minutes=TEST_CAPACITY_MINUTES,
                utilization_percent=value,
            )
        timestamp = end - timedelta(minutes=length - i)
        snapshots.append(UtilizationSnapshot(timestamp.isoformat(), "test", per_resource))
    return snapshots


# Series fixtures
@pytest.fixture
def spike_series():
    """Stable baseline around 0.40 followed by a 0.55 spike."""
    return [0.40, 0.41, 0.39, 0.40, 0.41, 0.55]


@pytest.fixture
def seasonal_spike_series():
    """Two seasons (length 6) oscillating within 0.30-0.32, then 0.45."""
    return [0.30, 0.31, 0.32, 0.31, 0.30, 0.31, 0.30, 0.31, 0.32, 0.31, 0.30, 0.31, 0.45]


@pytest.fixture
def sustained_ramp_series():
    """Steady ~0.30 baseline followed by a gradual sustained rise."""
    return [0.30, 0.31, 0.29, 0.30, 0.31, 0.32, 0.33, 0.34, 0.35, 0.36, 0.37, 0.38]


@pytest.fixture
def noisy_stable_series():
    """Noise around 0.30 without any sustained shift."""
    return [0.30, 0.31, 0.29, 0.30, 0.31, 0.30, 0.31, 0.29, 0.30, 0.30, 0.31, 0.29]


# Engine fixtures
@pytest.fixture
def store():
    """Empty snapshot store with the default capacity."""
    return SnapshotStore()


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def analytics(store, fixed_clock):
    """Analytics engine over an isolated store and a fixed clock."""
    return UtilizationAnalytics(store=store, clock=fixed_clock)


@pytest.fixture
def snapshot_factory():
    """Build synthetic snapshots from per-resource sequences."""
    return build_snapshots


@pytest.fixture
def inject(store):
    """Replace the store history with synthetic per-resource sequences."""

    def _inject(sequences: dict[str, list[float]]):
        store.reset()
        store.extend(build_snapshots(sequences))
        return store

    return _inject


# Consumer fixtures
@pytest.fixture
def consumer_config():
    """Basic utilization consumer configuration for testing."""
    return UtilizationConsumerConfig(
        kafka_bootstrap_servers="localhost:9092",
        kafka_topic="test-topic",
        kafka_group_id="test-group",
        postgres_host="localhost",
        postgres_port=5432,
        postgres_database="test_db",
        postgres_user="test_user",
        postgres_password="test_password",
        capacity_minutes={"room-a": 100},
        restore_history=False,
    )
