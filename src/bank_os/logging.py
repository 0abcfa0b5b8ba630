"""Audit logging for the simulator.

Every subsystem writes structured entries into one shared, in-memory
log buffer, the way a kernel writes into its ring buffer (``dmesg``).
The log is the simulator's only observability channel: the process
table announces every PID state change here, the IPC hub records each
message it routes, and the ledger records each balance movement.

- **LogLevel** - severity levels ordered for filtering (DEBUG < ERROR).
- **LogEntry** - a single structured record (level, message, source).
- **Logger** - an append-only log with filtering and clearing.

Workers in the concurrent transaction mode log from several threads at
once, so appends are serialized with a private lock.  The lock is a
leaf: nothing else is called while it is held.
"""

from dataclasses import dataclass
from enum import IntEnum
from threading import Lock


class LogLevel(IntEnum):
    """Severity levels for log entries.

    Using IntEnum means levels compare with ``<`` / ``>`` naturally,
    which makes minimum-level filtering trivial.
    """

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """A single structured log record.

    Attributes:
        level: The severity of this event.
        message: A human-readable description of what happened.
        source: The subsystem that generated the event (e.g. "ipc").

    """

    level: LogLevel
    message: str
    source: str

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: message``."""
        return f"[{self.level.name}] {self.source}: {self.message}"


class Logger:
    """Thread-safe, append-only log buffer with filtering."""

    def __init__(self) -> None:
        """Create an empty logger."""
        self._entries: list[LogEntry] = []
        self._lock = Lock()

    @property
    def entries(self) -> list[LogEntry]:
        """Return all log entries in chronological order."""
        with self._lock:
            return list(self._entries)

    def log(self, level: LogLevel, message: str, *, source: str) -> None:
        """Append a new entry to the log.

        Args:
            level: Severity of the event.
            message: Human-readable event description.
            source: Subsystem that generated the event.

        """
        entry = LogEntry(level=level, message=message, source=source)
        with self._lock:
            self._entries.append(entry)

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
    ) -> list[LogEntry]:
        """Return entries matching the given criteria.

        Args:
            min_level: If set, only return entries at or above this level.
            source: If set, only return entries from this source.

        Returns:
            A filtered list of log entries.

        """
        result = self.entries
        if min_level is not None:
            result = [e for e in result if e.level >= min_level]
        if source is not None:
            result = [e for e in result if e.source == source]
        return result

    def clear(self) -> None:
        """Remove all log entries."""
        with self._lock:
            self._entries.clear()
