"""Audit trail of filesystem activity.

Every mutation is recorded at ``INFO`` and every refused request at
``WARNING``, tagged with the subsystem (``"fs"`` or ``"users"``) and
the acting username.  ``log`` in the shell and ``Logger.denials()``
read it back.

The buffer may be bounded: with ``capacity`` set, the oldest records
are dropped once it is full, like a kernel ring buffer.
"""

from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """Severity of an audit record, ordered for ``min_level`` filtering."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """One audit record.

    Attributes:
        level: How serious the event is.
        message: What happened, e.g. ``"mkdir /home/alice"``.
        source: Subsystem that recorded it (``"fs"`` or ``"users"``).
        user: The username the operation ran as.

    """

    level: LogLevel
    message: str
    source: str
    user: str = "root"

    def __str__(self) -> str:
        """Format as ``[LEVEL] source (user): message``."""
        return f"[{self.level.name}] {self.source} ({self.user}): {self.message}"


class Logger:
    """Append-only, optionally bounded, audit buffer."""

    def __init__(self, *, capacity: int | None = None) -> None:
        """Create an empty audit log.

        Args:
            capacity: Maximum number of records kept; ``None`` for no limit.

        Raises:
            ValueError: If *capacity* is not positive.

        """
        if capacity is not None and capacity <= 0:
            msg = f"Log capacity must be positive, got {capacity}"
            raise ValueError(msg)
        self._records: deque[LogEntry] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int | None:
        """Return the record limit, or ``None`` if unbounded."""
        return self._records.maxlen

    @property
    def entries(self) -> list[LogEntry]:
        """Return a snapshot of the records, oldest first."""
        return list(self._records)

    def __len__(self) -> int:
        """Return the number of records currently held."""
        return len(self._records)

    def __iter__(self) -> Iterator[LogEntry]:
        """Iterate over a snapshot of the records, oldest first."""
        return iter(self.entries)

    def log(self, level: LogLevel, message: str, *, source: str, user: str = "root") -> None:
        """Record an event, evicting the oldest record if the log is full."""
        self._records.append(LogEntry(level=level, message=message, source=source, user=user))

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
        user: str | None = None,
    ) -> list[LogEntry]:
        """Return the records that satisfy every given criterion.

        Args:
            min_level: Keep records at or above this level.
            source: Keep records from this subsystem only.
            user: Keep records of operations run as this user only.

        """
        return [
            entry
            for entry in self._records
            if (min_level is None or entry.level >= min_level)
            and (source is None or entry.source == source)
            and (user is None or entry.user == user)
        ]

    def denials(self, user: str | None = None) -> list[LogEntry]:
        """Return refused requests, optionally for one user."""
        return self.filter(min_level=LogLevel.WARNING, user=user)

    def tail(self, count: int) -> list[LogEntry]:
        """Return the newest *count* records, oldest first."""
        if count <= 0:
            return []
        return list(self._records)[-count:]

    def clear(self) -> None:
        """Drop every record."""
        self._records.clear()
