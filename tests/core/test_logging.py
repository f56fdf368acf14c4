"""Tests for structured logging configuration."""

import json
import logging

from stripe_spine.core.logging import configure_logging, get_logger, is_configured


class TestConfigureLogging:
    def test_configure_sets_levels(self):
        configure_logging(level="DEBUG", format="console", force=True)
        assert is_configured()
        assert logging.getLogger("stripe_spine").level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_json_output(self, capsys):
        """JSON format renders one object per event with its fields."""
        configure_logging(level="INFO", format="json", force=True)
        get_logger("stripe_spine.test").info("scan_finished", resource="charges", rows=3)
        line = capsys.readouterr().err.strip().splitlines()[-1]
        event = json.loads(line)
        assert event["event"] == "scan_finished"
        assert event["resource"] == "charges"
        assert event["rows"] == 3
        assert event["level"] == "info"
        assert "timestamp" in event

    def test_level_filters_debug(self, capsys):
        configure_logging(level="WARNING", format="json", force=True)
        get_logger("stripe_spine.test").debug("scan_page", page=1)
        assert "scan_page" not in capsys.readouterr().err
