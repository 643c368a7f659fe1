"""Derivation of utilization percentages from counter snapshots."""

import logging

from sysbar.errors import CounterAnomaly
from sysbar.models import CpuSnapshot, MemSnapshot, UsagePercentages

logger = logging.getLogger(__name__)


def _clamp_percent(value: float) -> float:
    return max(0.0, min(100.0, value))


class UsageCalculator:
    """
    Turn snapshots into percentages.

    CPU usage is a rate, so the calculator keeps the previous CPU snapshot and
    reports the share of non-idle jiffies between the two. Memory and swap are
    computed from a single snapshot.
    """

    def __init__(self) -> None:
        """Initialize the calculator with no CPU baseline."""
        self._previous: CpuSnapshot | None = None

    @property
    def previous(self) -> CpuSnapshot | None:
        """The retained CPU baseline, or None before priming."""
        return self._previous

    @property
    def is_primed(self) -> bool:
        """Check whether a CPU baseline is held."""
        return self._previous is not None

    def reset(self) -> None:
        """Discard the CPU baseline so the next sample primes again."""
        self._previous = None

    def compute_cpu(self, current: CpuSnapshot) -> float | None:
        """
        Compute CPU usage since the previous snapshot.

        Returns None on the priming sample and whenever the total counter did
        not advance. The baseline is replaced by ``current`` in every case.
        """
        previous = self._previous
        self._previous = current

        if previous is None:
            return None

        try:
            return self._cpu_delta(previous, current)
        except CounterAnomaly as exc:
            logger.debug("cpu usage unknown: %s", exc)
            return None

    @staticmethod
    def _cpu_delta(previous: CpuSnapshot, current: CpuSnapshot) -> float:
        total_diff = current.total - previous.total
        if total_diff <= 0:
            raise CounterAnomaly(total_diff)
        used_diff = current.used - previous.used
        return _clamp_percent(used_diff / total_diff * 100.0)

    @staticmethod
    def compute_mem(snapshot: MemSnapshot) -> float | None:
        """Compute memory usage as (MemTotal - MemAvailable) / MemTotal."""
        total = snapshot.mem_total
        available = snapshot.mem_available
        if total is None or available is None or total <= 0:
            return None
        return _clamp_percent((total - available) / total * 100.0)

    @staticmethod
    def compute_swap(snapshot: MemSnapshot) -> tuple[float | None, bool]:
        """
        Compute swap usage.

        Returns:
            A (percentage, available) pair. ``available`` only reflects whether
            swap is configured, so a missing SwapFree still reports available.
        """
        total = snapshot.swap_total
        available = total is not None and total > 0
        if not available or snapshot.swap_free is None:
            return None, available
        return _clamp_percent((total - snapshot.swap_free) / total * 100.0), available

    def compute(
        self,
        cpu: CpuSnapshot | None,
        mem: MemSnapshot | None,
    ) -> UsagePercentages:
        """
        Derive all three metrics for one tick.

        Either snapshot may be None when its source failed; only the metrics
        that depend on it become unknown. A missing CPU snapshot leaves the
        baseline untouched.
        """
        cpu_percent = self.compute_cpu(cpu) if cpu is not None else None
        if mem is None:
            return UsagePercentages(cpu=cpu_percent)

        swap_percent, swap_available = self.compute_swap(mem)
        return UsagePercentages(
            cpu=cpu_percent,
            mem=self.compute_mem(mem),
            swap=swap_percent,
            swap_available=swap_available,
        )
