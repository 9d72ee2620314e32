"""
In-Memory Log Buffer

Bounded ring buffer of recent log entries, registered as a loguru sink.
Backs the log viewer without any module-level mutable log list.
"""

from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Any, Optional
from uuid import uuid4

from loguru import logger


@dataclass
class LogEntry:
    """A captured log record."""

    id: str
    timestamp: datetime
    level: str
    source: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "level": self.level,
            "source": self.source,
            "message": self.message,
            "details": self.details,
        }


class LogBuffer:
    """Thread-safe bounded store of the most recent log entries."""

    def __init__(self, maxsize: int = 1000):
        self.maxsize = maxsize
        self._entries: deque[LogEntry] = deque(maxlen=maxsize)
        self._lock = Lock()

    def write(self, message) -> None:
        """loguru sink: capture the structured record behind a message."""
        record = message.record
        extra = dict(record["extra"])
        source = extra.pop("name", record["name"])
        self.append(LogEntry(
            id=uuid4().hex[:12],
            timestamp=record["time"],
            level=record["level"].name.lower(),
            source=str(source),
            message=record["message"],
            details=extra,
        ))

    def append(self, entry: LogEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def get_logs(
        self,
        sources: Optional[list[str]] = None,
        levels: Optional[list[str]] = None,
        limit: Optional[int] = None,
        since: Optional[datetime] = None,
    ) -> list[LogEntry]:
        """
        Return captured entries, newest first.

        Args:
            sources: Keep only these component names
            levels: Keep only these level names (lower case)
            limit: Maximum number of entries
            since: Keep entries at or after this moment (naive values are local time)
        """
        with self._lock:
            entries = list(self._entries)

        if sources:
            entries = [e for e in entries if e.source in sources]
        if levels:
            entries = [e for e in entries if e.level in levels]
        if since is not None:
            if since.tzinfo is None:
                since = since.astimezone()
            entries = [e for e in entries if e.timestamp >= since]

        entries.sort(key=lambda e: e.timestamp, reverse=True)

        if limit:
            entries = entries[:limit]
        return entries

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> dict[str, Any]:
        """Counts per level and per source, plus errors in the last hour."""
        with self._lock:
            entries = list(self._entries)

        one_hour_ago = datetime.now(timezone.utc) - timedelta(hours=1)
        recent_errors = sum(
            1 for e in entries
            if e.level in ("error", "critical") and e.timestamp >= one_hour_ago
        )

        return {
            "total": len(entries),
            "by_level": dict(Counter(e.level for e in entries)),
            "by_source": dict(Counter(e.source for e in entries)),
            "recent_errors": recent_errors,
        }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def install_log_buffer(buffer: LogBuffer, level: str = "DEBUG") -> int:
    """Register the buffer as a loguru sink and return the handler id."""
    return logger.add(buffer.write, level=level, format="{message}")
