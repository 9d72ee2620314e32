"""
Test Log Buffer

The bounded in-memory log store and its loguru sink.
"""

from datetime import datetime, timedelta, timezone

import pytest
from loguru import logger

from core.log_buffer import LogBuffer, LogEntry, install_log_buffer


def entry(n, level="info", source="insights", minutes_ago=0):
    return LogEntry(
        id=f"e{n}",
        timestamp=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
        level=level,
        source=source,
        message=f"message {n}",
    )


@pytest.fixture
def buffer():
    return LogBuffer(maxsize=5)


@pytest.fixture
def captured():
    buffer = LogBuffer(maxsize=100)
    handler_id = install_log_buffer(buffer)
    yield buffer
    logger.remove(handler_id)


class TestLogBuffer:
    def test_bounded(self, buffer):
        for n in range(8):
            buffer.append(entry(n, minutes_ago=10 - n))

        assert len(buffer) == 5
        assert [e.id for e in buffer.get_logs()] == ["e7", "e6", "e5", "e4", "e3"]

    def test_filters(self, buffer):
        buffer.append(entry(1, level="info", source="insights", minutes_ago=3))
        buffer.append(entry(2, level="error", source="ai", minutes_ago=2))
        buffer.append(entry(3, level="warning", source="ai", minutes_ago=1))

        assert [e.id for e in buffer.get_logs(sources=["ai"])] == ["e3", "e2"]
        assert [e.id for e in buffer.get_logs(levels=["error"])] == ["e2"]
        assert [e.id for e in buffer.get_logs(limit=1)] == ["e3"]

        since = datetime.now(timezone.utc) - timedelta(minutes=2, seconds=30)
        assert [e.id for e in buffer.get_logs(since=since)] == ["e3", "e2"]

    def test_naive_since_is_local_time(self, buffer):
        """A naive since is read as local time instead of failing to compare."""
        buffer.append(entry(1, minutes_ago=3))
        buffer.append(entry(2, minutes_ago=1))

        since = datetime.now() - timedelta(minutes=2)
        assert [e.id for e in buffer.get_logs(since=since)] == ["e2"]

    def test_stats(self, buffer):
        buffer.append(entry(1, level="error", source="ai", minutes_ago=5))
        buffer.append(entry(2, level="error", source="ai", minutes_ago=120))
        buffer.append(entry(3, level="info", source="insights"))

        stats = buffer.stats()
        assert stats["total"] == 3
        assert stats["by_level"] == {"error": 2, "info": 1}
        assert stats["by_source"] == {"ai": 2, "insights": 1}
        assert stats["recent_errors"] == 1

    def test_clear(self, buffer):
        buffer.append(entry(1))
        buffer.clear()
        assert len(buffer) == 0
        assert buffer.get_logs() == []

    def test_to_dict(self):
        data = entry(1).to_dict()
        assert data["id"] == "e1"
        assert isinstance(data["timestamp"], str)


class TestLoguruSink:
    def test_captures_bound_records(self, captured):
        logger.bind(name="llm", model="llama").warning("model slow")

        logs = captured.get_logs(sources=["llm"])
        assert len(logs) == 1
        assert logs[0].level == "warning"
        assert logs[0].message == "model slow"
        assert logs[0].details == {"model": "llama"}

    def test_unbound_records_use_module_name(self, captured):
        logger.info("plain")

        logs = captured.get_logs()
        assert logs[0].source == __name__
