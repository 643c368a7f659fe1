"""Exception types raised while sampling system counters."""


class SysbarError(Exception):
    """Base class for sampling failures."""


class SourceReadError(SysbarError):
    """A pseudo-file could not be read."""

    def __init__(self, source: str, path: str, reason: str) -> None:
        super().__init__(f"cannot read {source} source {path}: {reason}")
        self.source = source
        self.path = path
        self.reason = reason


class ParseError(SysbarError):
    """A source was read but its expected structure is absent or malformed."""

    def __init__(self, source: str, detail: str) -> None:
        super().__init__(f"cannot parse {source}: {detail}")
        self.source = source
        self.detail = detail


class CounterAnomaly(SysbarError):
    """CPU counters did not advance between two samples.

    Not a real failure: the tick reports the CPU metric as unknown.
    """

    def __init__(self, total_diff: int) -> None:
        super().__init__(f"cpu total did not advance (diff={total_diff})")
        self.total_diff = total_diff
