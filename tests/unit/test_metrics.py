"""
Unit tests for MetricsCollector and timed_operation.
"""

import pytest

from mdb_models import MongoModel
from mdb_models.observability.metrics import (
    MetricsCollector,
    get_metrics_collector,
    record_operation,
    timed_operation,
)


class TestMetricsCollector:
    """Test recording and eviction."""

    def test_record_and_snapshot(self):
        collector = MetricsCollector()
        collector.record("models.paged_find", 10.0, collection="users")
        collector.record("models.paged_find", 30.0, ValueError("x"), collection="users")

        entry = collector.snapshot("models.paged_find")["models.paged_find:users"]
        assert entry["calls"] == 2
        assert entry["failures"] == 1
        assert entry["mean_ms"] == 20.0
        assert entry["slowest_ms"] == 30.0
        assert entry["last_error"] == "ValueError"

    def test_key_without_collection(self):
        collector = MetricsCollector()
        collector.record("connection.connect", 5.0)

        assert list(collector.snapshot()) == ["connection.connect"]

    def test_least_recently_touched_is_evicted(self):
        collector = MetricsCollector(max_entries=2)
        collector.record("a", 1.0)
        collector.record("b", 1.0)
        collector.record("a", 1.0)
        collector.record("c", 1.0)

        assert set(collector.snapshot()) == {"a", "c"}

    def test_calls_span_collections(self):
        collector = MetricsCollector()
        collector.record("op", 1.0, collection="a")
        collector.record("op", 1.0, collection="b")
        collector.record("other", 1.0)

        assert collector.calls("op") == 2

    def test_module_level_record(self):
        collector = get_metrics_collector()
        collector.reset()

        record_operation("plugin.startup", 2.0)

        assert collector.calls("plugin.startup") == 1


class TestTimedOperation:
    """Test the timing decorator."""

    @pytest.mark.asyncio
    async def test_failure_is_recorded_and_reraised(self):
        collector = get_metrics_collector()
        collector.reset()

        @timed_operation("test.failure")
        async def fail():
            raise ValueError("boom")

        with pytest.raises(ValueError):
            await fail()

        entry = collector.snapshot("test.failure")["test.failure"]
        assert entry["failures"] == 1

    @pytest.mark.asyncio
    async def test_collection_taken_from_model_class(self):
        collector = get_metrics_collector()
        collector.reset()

        class Widget(MongoModel):
            collection_name = "widgets"

            @classmethod
            @timed_operation("test.widget")
            async def touch(cls):
                return cls.collection_name

        assert await Widget.touch() == "widgets"
        assert Widget.touch.__name__ == "touch"
        assert "test.widget:widgets" in collector.snapshot()
