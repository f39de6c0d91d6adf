"""
Data models for utilization snapshots.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any


class VarianceMode(str, Enum):
    """Divisor used when estimating variance from a baseline"""

    POPULATION = "population"  # divide by n
    SAMPLE = "sample"  # divide by n - 1


@dataclass(frozen=True)
class ResourceUtilization:
    """Booked vs. available minutes for one resource at one point in time"""

    booked_minutes: float
    capacity_minutes: float | None
    utilization_percent: float

    @classmethod
    def from_minutes(
        cls, booked_minutes: float, capacity_minutes: float | None
    ) -> "ResourceUtilization":
        """Build the entry, deriving the utilization ratio

        The ratio is ``booked / capacity`` when the capacity is a positive number,
        otherwise 0 and the capacity is recorded as unknown.
        """
        booked = max(0.0, float(booked_minutes or 0))
        capacity = _positive_or_none(capacity_minutes)
        utilization = booked / capacity if capacity is not None else 0.0
        return cls(
            booked_minutes=booked,
            capacity_minutes=capacity,
            utilization_percent=utilization,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "booked_minutes": self.booked_minutes,
            "capacity_minutes": self.capacity_minutes,
            "utilization_percent": self.utilization_percent,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ResourceUtilization":
        return cls(
            booked_minutes=data.get("booked_minutes", 0.0),
            capacity_minutes=data.get("capacity_minutes"),
            utilization_percent=data.get("utilization_percent", 0.0),
        )


@dataclass(frozen=True)
class UtilizationSnapshot:
    """One observation of every known resource

    ``origin`` records what triggered the sample (booking mutation, metrics
    scrape, ...) and is kept for auditing only. ``per_resource`` is a read-only
    view so stored history cannot be edited through a returned snapshot.
    """

    timestamp: str
    origin: str
    per_resource: Mapping[str, ResourceUtilization] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "per_resource", MappingProxyType(dict(self.per_resource)))

    @classmethod
    def capture(
        cls,
        origin: str | None,
        per_resource: Mapping[str, ResourceUtilization],
        timestamp: datetime | None = None,
    ) -> "UtilizationSnapshot":
        moment = timestamp or datetime.now(UTC)
        return cls(
            timestamp=moment.isoformat(),
            origin=origin or "unknown",
            per_resource=per_resource,
        )

    def utilization(self, resource_id: str) -> float | None:
        entry = self.per_resource.get(resource_id)
        return entry.utilization_percent if entry is not None else None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "timestamp": self.timestamp,
            "origin": self.origin,
            "per_resource": {rid: entry.to_dict() for rid, entry in self.per_resource.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UtilizationSnapshot":
        """Create from dictionary"""
        return cls(
            timestamp=data["timestamp"],
            origin=data.get("origin") or "unknown",
            per_resource={
                rid: ResourceUtilization.from_dict(entry)
                for rid, entry in (data.get("per_resource") or {}).items()
            },
        )


def _positive_or_none(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if value > 0 else None
