"""
Base abstract interfaces and result types for utilization analytics methods.

Forecasters project the next utilization value of a resource series;
detectors decide whether the latest value is abnormal. Both are stateless:
the result is a pure function of the series and the method configuration.

Results are a tagged family of dataclasses. Every result carries a
``method`` tag, so consumers can dispatch on the type (or the tag) instead of
probing for optional fields.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class ResourceResult:
    """Fields shared by every per-resource result"""

    resource_id: str
    samples: int

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization"""
        return asdict(self)


class UtilizationMethod(ABC):
    """Common surface of forecasters and detectors"""

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of the method"""
        pass

    @property
    @abstractmethod
    def history_window(self) -> int:
        """Number of most recent snapshots the method looks at"""
        pass

    @abstractmethod
    def get_config(self) -> dict[str, Any]:
        """Get the resolved configuration of this method"""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(config={self.get_config()})"


class Forecaster(UtilizationMethod):
    """Abstract base class for next-period utilization forecasters"""

    @abstractmethod
    def forecast(self, resource_id: str, series: Sequence[float]) -> ResourceResult:
        """Project the next utilization value of one resource

        Args:
            resource_id: Identifier of the scheduled resource
            series: Utilization ratios, oldest first

        Returns:
            A forecast result; defined for every series length
        """
        pass

    def forecast_all(self, sequences: Mapping[str, Sequence[float]]) -> list[ResourceResult]:
        return [self.forecast(rid, series) for rid, series in sequences.items()]


class AnomalyDetector(UtilizationMethod):
    """Abstract base class for utilization anomaly detectors"""

    @abstractmethod
    def detect(self, resource_id: str, series: Sequence[float]) -> ResourceResult | None:
        """Evaluate the latest sample of one resource

        Args:
            resource_id: Identifier of the scheduled resource
            series: Utilization ratios, oldest first

        Returns:
            A detection result, or None when the series is too short to judge
        """
        pass

    def detect_all(self, sequences: Mapping[str, Sequence[float]]) -> list[ResourceResult]:
        """Run detection on every series, omitting resources with insufficient samples"""
        results = []
        for rid, series in sequences.items():
            result = self.detect(rid, series)
            if result is not None:
                results.append(result)
        return results
