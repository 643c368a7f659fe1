"""Raw access to the kernel pseudo-files sysbar samples."""

from sysbar.errors import SourceReadError

PROC_STAT = "/proc/stat"
PROC_MEMINFO = "/proc/meminfo"

# Both files are a few kB; anything past this is not worth waiting for.
MAX_READ_BYTES = 1024 * 1024


class SystemStateReader:
    """
    Read the processor-statistics and memory-information files as text.

    The reader does no parsing and no retrying. Each call re-reads the whole
    file, which is what the kernel expects for /proc entries.
    """

    def __init__(self, stat_path: str = PROC_STAT, meminfo_path: str = PROC_MEMINFO) -> None:
        """
        Initialize the reader.

        Args:
            stat_path: Path of the processor-statistics file.
            meminfo_path: Path of the memory-information file.
        """
        self.stat_path = stat_path
        self.meminfo_path = meminfo_path

    def read(self, path: str, source: str | None = None) -> str:
        """
        Read a file in full as UTF-8 text.

        Args:
            path: File to read.
            source: Short name used in error messages. Defaults to the path.

        Raises:
            SourceReadError: If the file is missing, not readable or not UTF-8.
        """
        name = source or path
        try:
            with open(path, "rb") as f:
                data = f.read(MAX_READ_BYTES)
        except OSError as exc:
            raise SourceReadError(name, path, exc.strerror or str(exc)) from exc

        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SourceReadError(name, path, "not valid UTF-8") from exc

    def read_stat(self) -> str:
        """Read the processor-statistics file."""
        return self.read(self.stat_path, "stat")

    def read_meminfo(self) -> str:
        """Read the memory-information file."""
        return self.read(self.meminfo_path, "meminfo")
