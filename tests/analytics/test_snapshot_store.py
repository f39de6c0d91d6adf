"""
Tests for the snapshot store and utilization models.
"""

import threading
from datetime import UTC, datetime

import pytest

from src.analytics import ResourceUtilization, SnapshotStore, UtilizationSnapshot
from src.analytics.store import HISTORY_CAPACITY, resource_series


class TestResourceUtilization:
    """Tests for ResourceUtilization."""

    def test_from_minutes(self):
        entry = ResourceUtilization.from_minutes(120, 240)

        assert entry.booked_minutes == 120.0
        assert entry.capacity_minutes == 240.0
        assert entry.utilization_percent == 0.5

    @pytest.mark.parametrize("capacity", [None, 0, -30, "240", True])
    def test_unknown_capacity_gives_zero_utilization(self, capacity):
        entry = ResourceUtilization.from_minutes(90, capacity)

        assert entry.capacity_minutes is None
        assert entry.utilization_percent == 0.0

    def test_overbooking_exceeds_one(self):
        assert ResourceUtilization.from_minutes(300, 240).utilization_percent == 1.25

    def test_negative_booked_minutes_are_clamped(self):
        assert ResourceUtilization.from_minutes(-10, 240).booked_minutes == 0.0


class TestUtilizationSnapshot:
    """Tests for UtilizationSnapshot."""

    def test_capture_defaults_origin(self):
        moment = datetime(2025, 10, 2, 12, 0, tzinfo=UTC)
        snapshot = UtilizationSnapshot.capture(None, {}, moment)

        assert snapshot.origin == "unknown"
        assert snapshot.timestamp == "2025-10-02T12:00:00+00:00"

    def test_dict_roundtrip(self):
        snapshot = UtilizationSnapshot.capture(
            "metrics-scrape", {"room-a": ResourceUtilization.from_minutes(60, 240)}
        )

        restored = UtilizationSnapshot.from_dict(snapshot.to_dict())

        assert restored == snapshot
        assert restored.utilization("room-a") == 0.25
        assert restored.utilization("room-b") is None


class TestSnapshotStore:
    """Tests for SnapshotStore."""

    def test_default_capacity(self):
        assert SnapshotStore().capacity == HISTORY_CAPACITY == 500

    def test_invalid_capacity(self):
        with pytest.raises(ValueError, match="capacity must be positive"):
            SnapshotStore(0)

    def test_evicts_oldest_when_full(self, snapshot_factory):
        store = SnapshotStore(capacity=3)
        snapshots = snapshot_factory({"room-a": [0.1, 0.2, 0.3, 0.4, 0.5]})

        for snapshot in snapshots:
            store.append(snapshot)

        assert len(store) == 3
        assert store.recent() == snapshots[-3:]

    def test_record_builds_entries_for_every_known_resource(self, store):
        snapshot = store.record(
            "booking-mutation",
            booked_minutes={"room-a": 60},
            capacity_minutes={"room-a": 240, "room-b": 480},
            resource_ids=["room-c"],
        )

        assert list(snapshot.per_resource) == ["room-a", "room-b", "room-c"]
        assert snapshot.utilization("room-a") == 0.25
        assert snapshot.utilization("room-b") == 0.0
        assert snapshot.per_resource["room-c"].capacity_minutes is None
        assert len(store) == 1

    def test_recent_returns_a_copy(self, store, snapshot_factory):
        store.extend(snapshot_factory({"room-a": [0.1, 0.2, 0.3]}))

        history = store.recent()
        history.clear()

        assert len(store) == 3

    def test_returned_snapshots_cannot_edit_history(self, analytics):
        analytics.record_snapshot("metrics-scrape", {"room-a": 10}, {"room-a": 100})
        listed = analytics.list_history()[0]

        with pytest.raises(TypeError):
            listed.per_resource["room-a"] = ResourceUtilization(0, 100, 0.99)

        assert analytics.store.recent()[0].utilization("room-a") == 0.1

    def test_snapshot_does_not_alias_callers_mapping(self):
        entries = {"room-a": ResourceUtilization.from_minutes(60, 240)}
        snapshot = UtilizationSnapshot("2025-10-02T12:00:00+00:00", "test", entries)

        entries["room-a"] = ResourceUtilization.from_minutes(240, 240)

        assert snapshot.utilization("room-a") == 0.25
        assert snapshot.to_dict()["per_resource"] == {
            "room-a": {
                "booked_minutes": 60.0,
                "capacity_minutes": 240.0,
                "utilization_percent": 0.25,
            }
        }

    def test_recent_limit(self, store, snapshot_factory):
        snapshots = snapshot_factory({"room-a": [0.1, 0.2, 0.3]})
        store.extend(snapshots)

        assert store.recent(2) == snapshots[1:]
        assert store.recent(10) == snapshots
        assert store.recent(0) == []

    def test_series_is_sparse(self, store, snapshot_factory):
        store.extend(snapshot_factory({"room-a": [0.1, 0.2, 0.3, 0.4], "room-b": [0.6, 0.7]}))

        assert store.series(10) == {"room-a": [0.1, 0.2, 0.3, 0.4], "room-b": [0.6, 0.7]}
        assert store.series(1) == {"room-a": [0.4], "room-b": [0.7]}

    def test_resource_series_order_of_first_appearance(self, snapshot_factory):
        snapshots = snapshot_factory({"late": [0.5], "early": [0.1, 0.2]})

        assert list(resource_series(snapshots)) == ["early", "late"]

    def test_reset(self, store, snapshot_factory):
        store.extend(snapshot_factory({"room-a": [0.1, 0.2]}))
        store.reset()

        assert len(store) == 0

    def test_concurrent_writers_respect_capacity(self):
        store = SnapshotStore(capacity=50)

        def writer(n):
            for i in range(100):
                store.record(f"writer-{n}", {"room-a": i}, {"room-a": 100})

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(store) == 50
        assert all(len(s.per_resource) == 1 for s in store.recent())
