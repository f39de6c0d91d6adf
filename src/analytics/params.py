"""
Parameter resolution for analytics operations.

Callers hand in loosely-typed values (query strings, CLI arguments, ``None``).
Each operation resolves them exactly once into a frozen dataclass; anything
non-numeric, non-finite or out of range silently becomes the documented
default, so the engine never raises a validation error.
"""

import math
from dataclasses import dataclass
from typing import Any

from .models import VarianceMode

# Defaults
HEURISTIC_WINDOW = 20
EXPONENTIAL_WINDOW = 50
DEFAULT_HISTORY_LIMIT = 50

DEFAULT_EXPONENTIAL_ALPHA = 0.5
DEFAULT_HW_ALPHA = 0.5
DEFAULT_HW_BETA = 0.3
DEFAULT_HW_GAMMA = 0.2
DEFAULT_SEASON_LENGTH = 6
MIN_SEASON_LENGTH = 2
MAX_SEASON_LENGTH = 24
HW_WINDOW_SEASONS = 6  # Holt-Winters looks at 6 seasons of snapshots

DEFAULT_SIMPLE_WINDOW = 50
DEFAULT_SEASONAL_WINDOW = 60
DEFAULT_PERSISTENCE_WINDOW = 80
DEFAULT_Z_THRESHOLD = 2.0
DEFAULT_DELTA_THRESHOLD = 0.08
DEFAULT_CUSUM_K = 0.25
DEFAULT_CUSUM_H = 5.0


def to_number(value: Any) -> float | None:
    """Best-effort numeric conversion, ``None`` when the value is not a finite number"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def positive_or_default(value: Any, default: float) -> float:
    number = to_number(value)
    return number if number is not None and number > 0 else default


def unit_interval_or_none(value: Any) -> float | None:
    """Value strictly inside (0, 1), otherwise ``None``"""
    number = to_number(value)
    return number if number is not None and 0 < number < 1 else None


def unit_interval_or_default(value: Any, default: float) -> float:
    number = unit_interval_or_none(value)
    return number if number is not None else default


def window_or_default(value: Any, default: int) -> int:
    """Positive integer window size (fractions are truncated like a query-string parse)"""
    number = to_number(value)
    if number is None or number < 1:
        return default
    return int(number)


def season_length_or_default(value: Any, default: int = DEFAULT_SEASON_LENGTH) -> int:
    number = to_number(value)
    if number is None:
        return default
    length = int(number)
    return length if MIN_SEASON_LENGTH <= length <= MAX_SEASON_LENGTH else default


def resolve_variance_mode(value: Any) -> VarianceMode:
    """``sample`` selects the n-1 divisor; anything else means population"""
    if isinstance(value, VarianceMode):
        return value
    if isinstance(value, str) and value.strip().lower() == VarianceMode.SAMPLE.value:
        return VarianceMode.SAMPLE
    return VarianceMode.POPULATION


def resolve_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return value is True


@dataclass(frozen=True)
class ExponentialParams:
    alpha: float = DEFAULT_EXPONENTIAL_ALPHA

    @classmethod
    def resolve(cls, alpha: Any = None) -> "ExponentialParams":
        return cls(alpha=unit_interval_or_default(alpha, DEFAULT_EXPONENTIAL_ALPHA))


@dataclass(frozen=True)
class HoltWintersParams:
    alpha: float = DEFAULT_HW_ALPHA
    beta: float = DEFAULT_HW_BETA
    gamma: float = DEFAULT_HW_GAMMA
    season_length: int = DEFAULT_SEASON_LENGTH

    @classmethod
    def resolve(
        cls, alpha: Any = None, beta: Any = None, gamma: Any = None, season_length: Any = None
    ) -> "HoltWintersParams":
        return cls(
            alpha=unit_interval_or_default(alpha, DEFAULT_HW_ALPHA),
            beta=unit_interval_or_default(beta, DEFAULT_HW_BETA),
            gamma=unit_interval_or_default(gamma, DEFAULT_HW_GAMMA),
            season_length=season_length_or_default(season_length),
        )

    @property
    def history_window(self) -> int:
        return self.season_length * HW_WINDOW_SEASONS


@dataclass(frozen=True)
class SimpleAnomalyParams:
    window: int = DEFAULT_SIMPLE_WINDOW
    z_threshold: float = DEFAULT_Z_THRESHOLD
    variance_mode: VarianceMode = VarianceMode.POPULATION

    @classmethod
    def resolve(
        cls, window: Any = None, z_threshold: Any = None, variance_mode: Any = None
    ) -> "SimpleAnomalyParams":
        return cls(
            window=window_or_default(window, DEFAULT_SIMPLE_WINDOW),
            z_threshold=positive_or_default(z_threshold, DEFAULT_Z_THRESHOLD),
            variance_mode=resolve_variance_mode(variance_mode),
        )


@dataclass(frozen=True)
class SeasonalAnomalyParams:
    window: int = DEFAULT_SEASONAL_WINDOW
    z_threshold: float = DEFAULT_Z_THRESHOLD
    season_length: int = DEFAULT_SEASON_LENGTH
    delta_threshold: float = DEFAULT_DELTA_THRESHOLD
    # Explicit smoothing overrides; None means "derive or use the default"
    alpha: float | None = None
    beta: float | None = None
    gamma: float | None = None
    adapt: bool = False
    variance_mode: VarianceMode = VarianceMode.POPULATION

    @classmethod
    def resolve(
        cls,
        window: Any = None,
        z_threshold: Any = None,
        season_length: Any = None,
        delta_threshold: Any = None,
        alpha: Any = None,
        beta: Any = None,
        gamma: Any = None,
        adapt: Any = False,
        variance_mode: Any = None,
    ) -> "SeasonalAnomalyParams":
        return cls(
            window=window_or_default(window, DEFAULT_SEASONAL_WINDOW),
            z_threshold=positive_or_default(z_threshold, DEFAULT_Z_THRESHOLD),
            season_length=season_length_or_default(season_length),
            delta_threshold=positive_or_default(delta_threshold, DEFAULT_DELTA_THRESHOLD),
            alpha=unit_interval_or_none(alpha),
            beta=unit_interval_or_none(beta),
            gamma=unit_interval_or_none(gamma),
            adapt=resolve_flag(adapt),
            variance_mode=resolve_variance_mode(variance_mode),
        )


@dataclass(frozen=True)
class PersistenceParams:
    window: int = DEFAULT_PERSISTENCE_WINDOW
    k: float = DEFAULT_CUSUM_K
    h: float = DEFAULT_CUSUM_H
    variance_mode: VarianceMode = VarianceMode.POPULATION

    @classmethod
    def resolve(
        cls, window: Any = None, k: Any = None, h: Any = None, variance_mode: Any = None
    ) -> "PersistenceParams":
        return cls(
            window=window_or_default(window, DEFAULT_PERSISTENCE_WINDOW),
            k=positive_or_default(k, DEFAULT_CUSUM_K),
            h=positive_or_default(h, DEFAULT_CUSUM_H),
            variance_mode=resolve_variance_mode(variance_mode),
        )
