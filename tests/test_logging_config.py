"""
Tests for logging configuration.
"""

import logging
import logging.config

from scriptguard.logging_config import ChildOutputFilter, get_logging_config


def make_record(name="scriptguard.executor.output", **extra):
    record = logging.LogRecord(name, logging.INFO, __file__, 1, "line", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestChildOutputFilter:
    """Test suppression of echoed child output."""

    def test_child_output_dropped_by_default(self):
        assert ChildOutputFilter().filter(make_record(guard_stream="stdout")) is False

    def test_child_output_kept_when_enabled(self):
        assert ChildOutputFilter(enabled=True).filter(make_record(guard_stream="stderr")) is True

    def test_other_records_pass(self):
        assert ChildOutputFilter().filter(make_record(name="scriptguard.guard")) is True


class TestGetLoggingConfig:
    """Test the dictConfig structure."""

    def test_levels_and_filter(self):
        config = get_logging_config("DEBUG", log_child_output=True)

        assert config["loggers"]["scriptguard"]["level"] == "DEBUG"
        assert config["filters"]["child_output_filter"]["enabled"] is True
        assert "child_output_filter" in config["handlers"]["default"]["filters"]

    def test_config_is_loadable(self):
        logging.config.dictConfig(get_logging_config())

        handler = logging.getLogger("scriptguard").handlers[0]
        assert any(isinstance(f, ChildOutputFilter) for f in handler.filters)
