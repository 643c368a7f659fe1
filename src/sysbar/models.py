"""Data models for sysbar."""

import math
from dataclasses import dataclass

MIN_DECIMAL_PLACES = 0
MAX_DECIMAL_PLACES = 2
DEFAULT_DECIMAL_PLACES = 2


def clamp_decimal_places(value: object) -> int:
    """
    Coerce an externally supplied precision into the supported range.

    Non-numeric values and NaN fall back to the default; other values are
    truncated toward zero and clamped into [0, 2].
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_DECIMAL_PLACES
    if isinstance(value, float):
        if math.isnan(value):
            return DEFAULT_DECIMAL_PLACES
        if math.isinf(value):
            return MAX_DECIMAL_PLACES if value > 0 else MIN_DECIMAL_PLACES
    return max(MIN_DECIMAL_PLACES, min(MAX_DECIMAL_PLACES, int(value)))


@dataclass(slots=True, frozen=True)
class CpuSnapshot:
    """Cumulative CPU jiffies since boot, taken from the aggregate cpu line."""

    total: int
    used: int  # total - idle - iowait


@dataclass(slots=True, frozen=True)
class MemSnapshot:
    """Memory and swap counters in kB. A field is None if its label was missing."""

    mem_total: int | None = None
    mem_available: int | None = None
    swap_total: int | None = None
    swap_free: int | None = None


@dataclass(slots=True, frozen=True)
class UsagePercentages:
    """Derived utilization for one tick. None means unknown."""

    cpu: float | None = None
    mem: float | None = None
    swap: float | None = None
    swap_available: bool = False


@dataclass(slots=True, frozen=True)
class DisplayConfig:
    """Presentation parameters read by the formatter."""

    decimal_places: int = DEFAULT_DECIMAL_PLACES

    def __post_init__(self) -> None:
        object.__setattr__(self, "decimal_places", clamp_decimal_places(self.decimal_places))
