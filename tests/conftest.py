"""Shared fixtures for sysbar tests."""

import itertools
import threading
from collections.abc import Iterable, Iterator

import pytest

from sysbar.errors import SourceReadError

STAT_T0 = """cpu  100 0 50 800 50 0 0 0 0 0
cpu0 50 0 25 400 25 0 0 0 0 0
cpu1 50 0 25 400 25 0 0 0 0 0
intr 12345 0 0
ctxt 987654
btime 1700000000
processes 4242
procs_running 2
procs_blocked 0
"""

STAT_T1 = """cpu  150 0 80 840 60 0 0 0 0 0
cpu0 75 0 40 420 30 0 0 0 0 0
cpu1 75 0 40 420 30 0 0 0 0 0
intr 12400 0 0
ctxt 987700
"""

MEMINFO = """MemTotal:       16000000 kB
MemFree:         2000000 kB
MemAvailable:    8000000 kB
Buffers:          300000 kB
Cached:          4000000 kB
SwapCached:            0 kB
SwapTotal:       4000000 kB
SwapFree:        3000000 kB
HugePages_Total:       0
Hugepagesize:       2048 kB
"""

MEMINFO_NO_SWAP = """MemTotal:       16000000 kB
MemAvailable:    8000000 kB
SwapTotal:             0 kB
SwapFree:              0 kB
"""


def advancing_stats() -> Iterator[str]:
    """Endless stat texts; each step adds 80 used out of 130 total jiffies."""
    for step in itertools.count():
        yield (
            f"cpu  {100 + 50 * step} 0 {50 + 30 * step} {800 + 40 * step} {50 + 10 * step} 0 0 0 0 0\n"
            f"intr {12345 + step} 0 0\n"
        )


class FakeReader:
    """SystemStateReader stand-in serving /proc texts from an iterable."""

    def __init__(
        self,
        stat: Iterable[str | Exception] | str | None = None,
        meminfo: str | Exception = MEMINFO,
    ) -> None:
        if stat is None:
            stat = [STAT_T0, STAT_T1]
        elif isinstance(stat, str):
            stat = [stat]
        self._stats = iter(stat)
        self._last: str | Exception | None = None
        self._meminfo = meminfo
        self.stat_reads = 0
        self.meminfo_reads = 0

    def read_stat(self) -> str:
        self.stat_reads += 1
        # The last entry repeats once the iterable runs dry.
        item = next(self._stats, self._last)
        self._last = item
        if isinstance(item, Exception):
            raise item
        return item

    def read_meminfo(self) -> str:
        self.meminfo_reads += 1
        if isinstance(self._meminfo, Exception):
            raise self._meminfo
        return self._meminfo


class RecordingSink:
    """MetricsSink that records every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, bool]] = []
        self.event = threading.Event()
        self._lock = threading.Lock()

    def set_cpu(self, text: str, visible: bool) -> None:
        self._record("cpu", text, visible)

    def set_mem(self, text: str, visible: bool) -> None:
        self._record("mem", text, visible)

    def set_swap(self, text: str, visible: bool) -> None:
        self._record("swap", text, visible)
        self.event.set()

    def _record(self, metric: str, text: str, visible: bool) -> None:
        with self._lock:
            self.calls.append((metric, text, visible))

    def last(self, metric: str) -> tuple[str, bool]:
        with self._lock:
            for name, text, visible in reversed(self.calls):
                if name == metric:
                    return text, visible
        raise AssertionError(f"no {metric} call recorded")

    def count(self) -> int:
        with self._lock:
            return len(self.calls)


@pytest.fixture
def reader() -> FakeReader:
    return FakeReader()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def missing_source() -> SourceReadError:
    return SourceReadError("stat", "/proc/stat", "No such file or directory")
