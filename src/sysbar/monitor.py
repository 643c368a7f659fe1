"""Sampling engine for sysbar."""

import logging
import threading
from enum import Enum
from queue import Queue
from typing import Protocol

from sysbar.config import DisplaySettings
from sysbar.errors import SysbarError
from sysbar.formatting import Readout, render
from sysbar.models import CpuSnapshot, MemSnapshot, UsagePercentages
from sysbar.parsers import parse_meminfo, parse_stat
from sysbar.sources import SystemStateReader
from sysbar.usage import UsageCalculator

logger = logging.getLogger(__name__)

UPDATE_INTERVAL_SECONDS = 1.0


class MetricsSink(Protocol):
    """Receiver of the formatted values, one call per metric per tick."""

    def set_cpu(self, text: str, visible: bool) -> None: ...

    def set_mem(self, text: str, visible: bool) -> None: ...

    def set_swap(self, text: str, visible: bool) -> None: ...


class QueueSink:
    """
    Sink that forwards readouts to a thread-safe Queue.

    The scheduler thread never touches widgets directly; the UI drains the
    queue on its own timer.
    """

    def __init__(self, update_queue: Queue[Readout]) -> None:
        self._queue = update_queue

    def set_cpu(self, text: str, visible: bool) -> None:
        self._queue.put(Readout("cpu", text, visible))

    def set_mem(self, text: str, visible: bool) -> None:
        self._queue.put(Readout("mem", text, visible))

    def set_swap(self, text: str, visible: bool) -> None:
        self._queue.put(Readout("swap", text, visible))


class SchedulerState(Enum):
    """Lifecycle states of a Scheduler."""

    IDLE = "idle"
    RUNNING = "running"


class PeriodicTask:
    """Handle for a running scheduler. Cancelling it more than once is a no-op."""

    def __init__(self, scheduler: "Scheduler") -> None:
        self._scheduler = scheduler
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        """Check if cancel() has been called."""
        return self._cancelled

    def cancel(self, timeout: float | None = 5.0) -> None:
        """
        Stop sampling.

        When this returns the sink will not be called again for this run.
        The thread is joined for at most ``timeout`` seconds; a pass stalled
        on a read is left to finish on its own and its result is dropped.

        Args:
            timeout: How long to wait for the thread to stop (seconds).
        """
        if self._cancelled:
            return
        self._cancelled = True
        self._scheduler._teardown(self, timeout)


class Scheduler:
    """
    Periodic sampler of CPU, memory and swap usage.

    Runs the sample pass once on start (priming the CPU baseline) and then
    every ``interval`` seconds in a daemon thread. Decimal-place changes
    reformat the last values immediately, without reading the sources again.
    Read and parse failures are logged and only blank the affected metric.
    """

    def __init__(
        self,
        sink: MetricsSink,
        settings: DisplaySettings | None = None,
        reader: SystemStateReader | None = None,
        calculator: UsageCalculator | None = None,
        interval: float = UPDATE_INTERVAL_SECONDS,
    ) -> None:
        """
        Initialize the Scheduler.

        Args:
            sink: Receiver of the formatted values.
            settings: Display settings to read and watch. A default instance
                is created if omitted.
            reader: Source of raw /proc text.
            calculator: Holder of the CPU baseline.
            interval: Seconds between sample passes. Default 1.0s.
        """
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval!r}")
        self._sink = sink
        self._settings = settings if settings is not None else DisplaySettings()
        self._reader = reader if reader is not None else SystemStateReader()
        self._calculator = calculator if calculator is not None else UsageCalculator()
        self._interval = interval
        # Guards the lifecycle fields; never held across a sample pass.
        self._state_lock = threading.Lock()
        # Serializes sample passes and reformats; reentrant so a sink may cancel.
        self._pass_lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._task: PeriodicTask | None = None
        self._handler_id: int | None = None
        self._state = SchedulerState.IDLE
        self._last_usage: UsagePercentages | None = None
        # Set when the baseline must be dropped before the next pass.
        self._reset_pending = False

    @property
    def interval(self) -> float:
        """Get the sampling interval in seconds."""
        return self._interval

    @property
    def settings(self) -> DisplaySettings:
        """Get the display settings this scheduler watches."""
        return self._settings

    @property
    def state(self) -> SchedulerState:
        """Get the lifecycle state."""
        return self._state

    @property
    def is_running(self) -> bool:
        """Check if the scheduler is running."""
        return self._state is SchedulerState.RUNNING

    @property
    def last_usage(self) -> UsagePercentages | None:
        """The percentages computed by the most recent pass."""
        return self._last_usage

    def start(self) -> PeriodicTask:
        """
        Prime the CPU baseline, emit the first values and arm the timer.

        The first pass always primes, even if sample_once() was used while
        idle.

        Returns:
            The handle of the run. Calling start() while running returns the
            existing handle.
        """
        with self._state_lock:
            if self._task is not None:
                return self._task

            stop_event = threading.Event()
            task = PeriodicTask(self)
            self._stop_event = stop_event
            self._state = SchedulerState.RUNNING
            self._task = task
            self._reset_pending = True
            self._handler_id = self._settings.connect(self._on_decimal_places_changed)

        with self._pass_lock:
            if not stop_event.is_set():
                try:
                    self._run_pass(stop_event)
                except Exception:
                    logger.exception("initial sample pass failed")

        with self._state_lock:
            if self._task is task and self._thread is None:
                self._thread = threading.Thread(
                    target=self._poll_loop,
                    args=(stop_event,),
                    daemon=True,
                    name="SysbarScheduler",
                )
                self._thread.start()
        return task

    def stop(self, timeout: float | None = 5.0) -> None:
        """Cancel the current run, if any."""
        task = self._task
        if task is not None:
            task.cancel(timeout)

    def sample_once(self) -> UsagePercentages:
        """
        Run one full read-parse-derive-emit pass and return its result.

        While running, the pass shares the timer's baseline and is cut short
        if the run is cancelled from the sink. While idle it is a standalone
        pass: it emits to the sink and advances the baseline, but start()
        still re-primes.
        """
        with self._pass_lock:
            stop_event = self._stop_event if self.is_running else None
            return self._run_pass(stop_event)

    def refresh(self) -> None:
        """Re-emit the last computed values with the current precision."""
        with self._pass_lock:
            stop_event = self._stop_event
            if not self.is_running or stop_event.is_set() or self._last_usage is None:
                return
            self._emit(self._last_usage, stop_event)

    def _teardown(self, task: PeriodicTask, timeout: float | None) -> None:
        with self._state_lock:
            if self._task is not task:
                return
            self._state = SchedulerState.IDLE
            self._task = None
            self._stop_event.set()
            if self._handler_id is not None:
                self._settings.disconnect(self._handler_id)
                self._handler_id = None
            thread = self._thread
            self._thread = None

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning("sample pass still running after %ss; leaving it to exit", timeout)

        # A stalled pass may still hold the lock; the next pass drops the
        # baseline instead of teardown waiting for it.
        if self._pass_lock.acquire(blocking=False):
            try:
                if self._task is None:
                    self._discard_baseline()
            finally:
                self._pass_lock.release()
        else:
            self._reset_pending = True

    def _discard_baseline(self) -> None:
        self._calculator.reset()
        self._last_usage = None
        self._reset_pending = False

    def _on_decimal_places_changed(self, value: int) -> None:
        logger.debug("decimal places changed to %d, reformatting", value)
        self.refresh()

    def _poll_loop(self, stop_event: threading.Event) -> None:
        """Timer loop running in the background thread."""
        while not stop_event.wait(timeout=self._interval):
            try:
                with self._pass_lock:
                    if stop_event.is_set():
                        break
                    self._run_pass(stop_event)
            except Exception:
                # Keep sampling; the next tick is the retry.
                logger.exception("sample pass failed")

    def _run_pass(self, stop_event: threading.Event | None) -> UsagePercentages:
        if self._reset_pending:
            self._discard_baseline()
        usage = self._calculator.compute(self._read_cpu(), self._read_mem())
        self._last_usage = usage
        self._emit(usage, stop_event)
        return usage

    def _read_cpu(self) -> CpuSnapshot | None:
        try:
            return parse_stat(self._reader.read_stat())
        except SysbarError as exc:
            logger.warning("cpu usage unavailable: %s", exc)
            return None

    def _read_mem(self) -> MemSnapshot | None:
        try:
            return parse_meminfo(self._reader.read_meminfo())
        except SysbarError as exc:
            logger.warning("memory usage unavailable: %s", exc)
            return None

    def _emit(self, usage: UsagePercentages, stop_event: threading.Event | None) -> None:
        cpu, mem, swap = render(usage, self._settings.to_config())
        for setter, readout in (
            (self._sink.set_cpu, cpu),
            (self._sink.set_mem, mem),
            (self._sink.set_swap, swap),
        ):
            # The sink itself may have cancelled the run.
            if stop_event is not None and stop_event.is_set():
                return
            setter(readout.text, readout.visible)
