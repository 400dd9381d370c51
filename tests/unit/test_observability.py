"""
Unit tests for contextual logging and operation metrics.
"""

import logging

from crud_engine.observability import (MetricsCollector, clear_correlation_id,
                                       current_context, get_logger,
                                       log_operation, operation_context,
                                       set_correlation_id)


class TestLoggingContext:
    def test_correlation_id_generated(self):
        correlation_id = set_correlation_id()
        try:
            assert current_context()["correlation_id"] == correlation_id
        finally:
            clear_correlation_id()
        assert current_context() == {}

    def test_operation_context_nests(self):
        with operation_context("Task", "update", "u1"):
            with operation_context("Note", "read", "u1"):
                assert current_context()["model_name"] == "Note"
            assert current_context() == {
                "model_name": "Task",
                "action": "update",
                "principal_id": "u1",
            }
        assert current_context() == {}

    def test_adapter_adds_context(self, caplog):
        logger = get_logger("crud_engine.tests")
        set_correlation_id("abc-123")
        try:
            with caplog.at_level(logging.INFO, logger="crud_engine.tests"):
                with operation_context("Task", "create"):
                    logger.info("hello")
        finally:
            clear_correlation_id()
        record = caplog.records[-1]
        assert record.correlation_id == "abc-123"
        assert record.model_name == "Task"

    def test_log_operation_levels(self, caplog):
        logger = logging.getLogger("crud_engine.tests.ops")
        with caplog.at_level(logging.INFO, logger="crud_engine.tests.ops"):
            log_operation(logger, "catalog.register", 1.5, model_name="Task")
            log_operation(logger, "catalog.register", 2.0, success=False, model_name="Task")

        ok, failed = caplog.records[-2:]
        assert ok.levelno == logging.INFO
        assert ok.getMessage() == "catalog.register completed in 1.50ms (model_name=Task)"
        assert failed.levelno == logging.WARNING
        assert failed.success is False


class TestMetricsCollector:
    def test_entries_per_model(self):
        collector = MetricsCollector()
        collector.record("engine.read", 2.0, model="Task")
        collector.record("engine.read", 4.0, success=False, model="Task")
        collector.record("engine.read", 1.0, model="Note")

        task = collector.get("engine.read", "Task")
        assert task.count == 2
        assert task.avg_ms == 3.0
        assert task.errors == 1

        summary = collector.summary()["engine.read"]
        assert summary["count"] == 3
        assert summary["max_ms"] == 4.0
        assert summary["model"] is None

    def test_get_returns_copy(self):
        collector = MetricsCollector()
        collector.record("engine.read", 1.0, model="Task")
        collector.get("engine.read", "Task").count = 99
        assert collector.get("engine.read", "Task").count == 1

    def test_evicts_least_recently_updated(self):
        collector = MetricsCollector(max_entries=2)
        collector.record("a", 1.0)
        collector.record("b", 1.0)
        collector.record("a", 1.0)
        collector.record("c", 1.0)
        assert [entry["operation"] for entry in collector.snapshot()] == ["a", "c"]

    def test_reset(self):
        collector = MetricsCollector()
        collector.record("a", 1.0)
        collector.reset()
        assert collector.snapshot() == []
        assert collector.get("a") is None
