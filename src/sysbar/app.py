"""sysbar - Main Textual application."""

import logging
from queue import Empty, Queue

from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.logging import TextualHandler
from textual.widgets import Footer, Static

from sysbar.config import DisplaySettings
from sysbar.formatting import PLACEHOLDER, Readout
from sysbar.monitor import UPDATE_INTERVAL_SECONDS, PeriodicTask, QueueSink, Scheduler
from sysbar.sources import SystemStateReader


class StatusBar(Horizontal):
    """Status bar showing CPU, memory and swap usage labels."""

    LABELS = {"cpu": "CPU", "mem": "Mem", "swap": "Swap"}

    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        dock: top;
        background: $surface;
    }

    StatusBar Static {
        width: auto;
        margin-right: 3;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize StatusBar."""
        super().__init__(*args, **kwargs)
        self._texts = {metric: f"{name}: {PLACEHOLDER}%" for metric, name in self.LABELS.items()}

    def compose(self) -> ComposeResult:
        """Compose the three labels with placeholder text."""
        for metric, text in self._texts.items():
            yield Static(text, id=f"{metric}-label")

    def text(self, metric: str) -> str:
        """Get the text currently shown for a metric."""
        return self._texts[metric]

    def set_cpu(self, text: str, visible: bool) -> None:
        """Show the CPU readout."""
        self._set_label("cpu", text, visible)

    def set_mem(self, text: str, visible: bool) -> None:
        """Show the memory readout."""
        self._set_label("mem", text, visible)

    def set_swap(self, text: str, visible: bool) -> None:
        """Show the swap readout, hiding the label when swap is not available."""
        self._set_label("swap", text, visible)

    def apply(self, readout: Readout) -> None:
        """Apply a readout received from the scheduler."""
        self._set_label(readout.metric, readout.text, readout.visible)

    def _set_label(self, metric: str, text: str, visible: bool) -> None:
        self._texts[metric] = text
        label = self.query_one(f"#{metric}-label", Static)
        label.update(text)
        label.display = visible


class SysbarApp(App):
    """Main sysbar application."""

    TITLE = "sysbar"
    SUB_TITLE = "CPU, memory and swap usage"

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("d", "cycle_decimals", "Decimals"),
        ("0", "set_decimals(0)", "0 dp"),
        ("1", "set_decimals(1)", "1 dp"),
        ("2", "set_decimals(2)", "2 dp"),
    ]

    def __init__(
        self,
        settings: DisplaySettings | None = None,
        reader: SystemStateReader | None = None,
        interval: float = UPDATE_INTERVAL_SECONDS,
    ) -> None:
        """
        Initialize the SysbarApp.

        Args:
            settings: Display settings shared with the scheduler.
            reader: Source of raw /proc text.
            interval: Seconds between samples.
        """
        super().__init__()
        self._settings = settings if settings is not None else DisplaySettings()
        self._update_queue: Queue[Readout] = Queue()
        self._scheduler = Scheduler(
            QueueSink(self._update_queue),
            settings=self._settings,
            reader=reader,
            interval=interval,
        )
        self._task: PeriodicTask | None = None

    @property
    def settings(self) -> DisplaySettings:
        """Get the display settings."""
        return self._settings

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield StatusBar(id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        """Start the scheduler when the app is mounted."""
        self._task = self._scheduler.start()
        self.set_interval(0.25, self._check_for_updates)

    def on_unmount(self) -> None:
        """Make sure the scheduler thread is gone before widgets are torn down."""
        self._stop_scheduler()

    def _stop_scheduler(self) -> None:
        if self._task is not None:
            self._task.cancel()

    def _check_for_updates(self) -> None:
        """Drain the queue and show the latest readout of each metric."""
        latest: dict[str, Readout] = {}
        while True:
            try:
                readout = self._update_queue.get_nowait()
            except Empty:
                break
            latest[readout.metric] = readout

        if not latest:
            return
        status_bar = self.query_one("#status-bar", StatusBar)
        for readout in latest.values():
            status_bar.apply(readout)

    def action_cycle_decimals(self) -> None:
        """Cycle the decimal precision."""
        places = self._settings.cycle_decimal_places()
        self.notify(f"Decimal places: {places}")

    def action_set_decimals(self, places: int) -> None:
        """Set the decimal precision."""
        self._settings.decimal_places = places
        self.notify(f"Decimal places: {self._settings.decimal_places}")

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._stop_scheduler()
        self.exit()


def main() -> None:
    """Entry point for the sysbar application."""
    logging.basicConfig(level=logging.INFO, handlers=[TextualHandler()])
    app = SysbarApp()
    app.run()


if __name__ == "__main__":
    main()
