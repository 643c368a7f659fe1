"""Parsers for /proc/stat and /proc/meminfo text."""

from sysbar.errors import ParseError
from sysbar.models import CpuSnapshot, MemSnapshot

# meminfo label -> MemSnapshot field
MEMINFO_FIELDS = {
    "MemTotal": "mem_total",
    "MemAvailable": "mem_available",
    "SwapTotal": "swap_total",
    "SwapFree": "swap_free",
}


def parse_stat(text: str) -> CpuSnapshot:
    """
    Parse the aggregate ``cpu`` line of /proc/stat.

    Only the line whose first token is exactly ``cpu`` is used; per-core lines
    (``cpu0``, ``cpu1``, ...) and all other categories are ignored. Fields are
    read in the order user, nice, system, idle, iowait. A missing iowait field
    counts as zero; later fields (irq, softirq, steal, ...) are ignored.

    Raises:
        ParseError: If there is no ``cpu`` line or its fields are malformed.
    """
    for line in text.splitlines():
        fields = line.split()
        if not fields or fields[0] != "cpu":
            continue

        values: list[int] = []
        for token in fields[1:6]:
            if not (token.isascii() and token.isdigit()):
                raise ParseError("stat", f"non-numeric cpu field {token!r}")
            values.append(int(token))

        if len(values) < 4:
            raise ParseError("stat", f"expected at least 4 cpu fields, got {len(values)}")

        user, nice, system, idle = values[:4]
        iowait = values[4] if len(values) > 4 else 0
        total = user + nice + system + idle + iowait
        return CpuSnapshot(total=total, used=total - idle - iowait)

    raise ParseError("stat", "no aggregate cpu line")


def _leading_int(value: str) -> int | None:
    parts = value.split()
    if not parts:
        return None
    try:
        return int(parts[0])
    except ValueError:
        return None


def parse_meminfo(text: str) -> MemSnapshot:
    """
    Parse ``Label:   value kB`` lines of /proc/meminfo.

    Only MemTotal, MemAvailable, SwapTotal and SwapFree are kept. Unknown
    labels and unparsable values are skipped, leaving the field as None.
    """
    found: dict[str, int] = {}
    for line in text.splitlines():
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        field = MEMINFO_FIELDS.get(key.strip())
        if field is None:
            continue
        number = _leading_int(value)
        if number is None or number < 0:
            continue
        found[field] = number

    return MemSnapshot(**found)
