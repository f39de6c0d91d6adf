"""
Bounded, append-only history of utilization snapshots.

The store is the single writer-owned piece of mutable state in the engine.
Writers go through one lock (append + evict oldest); readers take a copy of
the history under the same lock and compute on that copy without holding it.
"""

import threading
from collections import deque
from collections.abc import Iterable, Mapping
from datetime import datetime

import structlog

from .models import ResourceUtilization, UtilizationSnapshot

logger = structlog.get_logger(__name__)

HISTORY_CAPACITY = 500


class SnapshotStore:
    """Ring buffer of the most recent utilization snapshots"""

    def __init__(self, capacity: int = HISTORY_CAPACITY):
        if capacity < 1:
            raise ValueError(f"Snapshot store capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._snapshots: deque[UtilizationSnapshot] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._snapshots)

    def append(self, snapshot: UtilizationSnapshot) -> UtilizationSnapshot:
        """Append a snapshot, evicting the oldest one when full"""
        with self._lock:
            self._snapshots.append(snapshot)
        return snapshot

    def extend(self, snapshots: Iterable[UtilizationSnapshot]) -> int:
        """Bulk-append snapshots in order (e.g. history restored from storage)"""
        count = 0
        with self._lock:
            for snapshot in snapshots:
                self._snapshots.append(snapshot)
                count += 1
        return count

    def record(
        self,
        origin: str | None,
        booked_minutes: Mapping[str, float],
        capacity_minutes: Mapping[str, float] | None = None,
        resource_ids: Iterable[str] = (),
        timestamp: datetime | None = None,
    ) -> UtilizationSnapshot:
        """Build a snapshot from per-resource minutes and append it

        Every resource that has bookings, a capacity, or is listed explicitly gets
        an entry; resources with unknown capacity are recorded at 0 utilization.
        """
        capacity_minutes = capacity_minutes or {}
        ids = list(dict.fromkeys([*booked_minutes, *capacity_minutes, *resource_ids]))

        per_resource = {
            rid: ResourceUtilization.from_minutes(
                booked_minutes.get(rid, 0), capacity_minutes.get(rid)
            )
            for rid in ids
        }
        snapshot = self.append(UtilizationSnapshot.capture(origin, per_resource, timestamp))

        logger.info(
            "Utilization snapshot recorded",
            origin=snapshot.origin,
            resources=len(per_resource),
        )
        return snapshot

    def recent(self, limit: int | None = None) -> list[UtilizationSnapshot]:
        """Copy of the most recent ``limit`` snapshots (all when ``None``), oldest first"""
        with self._lock:
            history = list(self._snapshots)
        if limit is None:
            return history
        return history[-limit:] if limit > 0 else []

    def series(self, window: int) -> dict[str, list[float]]:
        """Per-resource utilization series over the most recent ``window`` snapshots

        Series are sparse: a snapshot without an entry for a resource contributes
        nothing to that resource's series. Resources appear in order of first
        appearance inside the window.
        """
        return resource_series(self.recent(window))

    def reset(self) -> None:
        with self._lock:
            self._snapshots.clear()


def resource_series(snapshots: Iterable[UtilizationSnapshot]) -> dict[str, list[float]]:
    """Group utilization values by resource, preserving snapshot order"""
    sequences: dict[str, list[float]] = {}
    for snapshot in snapshots:
        for rid, entry in snapshot.per_resource.items():
            sequences.setdefault(rid, []).append(entry.utilization_percent)
    return sequences
