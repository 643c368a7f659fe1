"""Text rendering of usage percentages."""

from dataclasses import dataclass

from sysbar.models import DisplayConfig, UsagePercentages, clamp_decimal_places

PLACEHOLDER = "--"


def format_percent(value: float | None, decimal_places: int) -> str:
    """Format a percentage without the % sign, or the placeholder if unknown."""
    if value is None:
        return PLACEHOLDER
    return f"{value:.{clamp_decimal_places(decimal_places)}f}"


def format_label(name: str, value: float | None, decimal_places: int) -> str:
    """Format a labelled percentage, e.g. ``CPU: 12.34%``."""
    return f"{name}: {format_percent(value, decimal_places)}%"


@dataclass(slots=True, frozen=True)
class Readout:
    """One formatted value for the presentation layer."""

    metric: str  # 'cpu', 'mem' or 'swap'
    text: str
    visible: bool = True


def render(usage: UsagePercentages, config: DisplayConfig) -> tuple[Readout, Readout, Readout]:
    """Render the CPU, memory and swap readouts for one tick."""
    places = config.decimal_places
    return (
        Readout("cpu", format_label("CPU", usage.cpu, places)),
        Readout("mem", format_label("Mem", usage.mem, places)),
        Readout("swap", format_label("Swap", usage.swap, places), usage.swap_available),
    )
