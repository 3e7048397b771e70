"""
Unit Tests - Logging
"""
import io
import json
import logging

import pytest
import structlog

from inventory_analytics.config.logging import ServiceInfo, configure_logging
from inventory_analytics.config.settings import MonitoringSettings, Settings
from inventory_analytics.reporting.generator import ReportGenerator


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


class TestConfigureLogging:
    """Tests for configure_logging"""

    def test_service_info_processor(self):
        """Test service name and version are added without overwriting"""
        processor = ServiceInfo(Settings(APP_NAME="stock-reports", version="2.1.0"))

        event = processor(None, "info", {"event": "hello", "version": "custom"})

        assert event["service"] == "stock-reports"
        assert event["version"] == "custom"

    def test_json_lines_go_to_stream(self, restore_root_logger):
        """Test JSON output carries the event, level and service"""
        stream = io.StringIO()
        settings = Settings(APP_NAME="stock-reports", monitoring=MonitoringSettings(log_format="json"))

        configure_logging("INFO", stream=stream, settings=settings)
        structlog.get_logger("inventory_analytics.tests").info("Snapshot loaded", products=4)
        line = json.loads(stream.getvalue().strip().splitlines()[-1])

        assert line["event"] == "Snapshot loaded"
        assert line["level"] == "info"
        assert line["products"] == 4
        assert line["service"] == "stock-reports"

    def test_level_filters_debug(self, restore_root_logger):
        stream = io.StringIO()
        settings = Settings(monitoring=MonitoringSettings(log_format="json"))

        configure_logging("WARNING", stream=stream, settings=settings)
        structlog.get_logger("inventory_analytics.tests").info("Hidden")

        assert "Hidden" not in stream.getvalue()


class TestReportContext:
    """Tests for the report id bound while a report is generated"""

    def test_report_id_is_bound_during_generation(self, static_source, now):
        """Test data-source calls see the report id and it is cleared afterwards"""
        seen = []
        fetch = static_source.fetch_product_snapshots

        def recording_fetch(filters, as_of):
            seen.append(structlog.contextvars.get_contextvars().get("report_id"))
            return fetch(filters, as_of)

        static_source.fetch_product_snapshots = recording_fetch

        ReportGenerator(static_source).generate({}, "analyst", now, report_id="INR-1-ABCDE")

        assert seen == ["INR-1-ABCDE", "INR-1-ABCDE"]
        assert "report_id" not in structlog.contextvars.get_contextvars()
