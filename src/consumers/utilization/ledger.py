"""
Confirmed booking minutes per resource.

The ledger folds booking mutations into the set of currently confirmed
bookings; snapshots are computed from its per-resource totals.
"""

from collections import defaultdict

import structlog

from .models import BookingEvent

logger = structlog.get_logger(__name__)

DEFAULT_RESOURCE_ID = "primary"


class BookingLedger:
    """Tracks confirmed bookings and their duration in minutes"""

    def __init__(self):
        self._bookings: dict[str, tuple[str, float]] = {}

    def __len__(self) -> int:
        return len(self._bookings)

    def apply(self, event: BookingEvent) -> bool:
        """Apply a booking mutation

        Returns:
            True if the event changed the ledger
        """
        if event.action in ("created", "confirmed", "rescheduled"):
            previous = self._bookings.get(event.booking_id)
            resource_id = event.resource_id or (previous[0] if previous else DEFAULT_RESOURCE_ID)
            self._bookings[event.booking_id] = (resource_id, max(0.0, event.duration_min))
            return True

        if event.action == "cancelled":
            return self._bookings.pop(event.booking_id, None) is not None

        logger.debug("Ignoring booking action", action=event.action, booking_id=event.booking_id)
        return False

    def minutes_per_resource(self) -> dict[str, float]:
        totals: dict[str, float] = defaultdict(float)
        for resource_id, minutes in self._bookings.values():
            totals[resource_id] += minutes
        return dict(totals)


def parse_capacity_map(raw: str | None) -> dict[str, float]:
    """Parse ``"room-a:240,room-b:480"`` into capacity minutes per resource

    Pairs without a resource id or with a non-positive capacity are skipped.
    """
    capacity: dict[str, float] = {}
    if not raw or not raw.strip():
        return capacity

    for pair in raw.split(","):
        resource_id, _, value = pair.strip().partition(":")
        resource_id = resource_id.strip()
        try:
            minutes = int(value.strip())
        except ValueError:
            logger.warning("Skipping invalid capacity entry", entry=pair.strip())
            continue
        if resource_id and minutes > 0:
            capacity[resource_id] = minutes
    return capacity
