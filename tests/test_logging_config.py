"""Tests for logging configuration."""

import json
import logging

from apigw_cli.logging_config import JSONFormatter, LoggerAdapter, TextFormatter, setup_logging


def make_record(**extra):
    record = logging.LogRecord("apigw_cli.routes", logging.DEBUG, __file__, 1, "Api get", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestFormatters:
    """Tests for text and JSON formatters."""

    def test_json_includes_extra_fields(self):
        payload = json.loads(JSONFormatter().format(make_record(basepath="/hello")))
        assert payload["msg"] == "Api get"
        assert payload["level"] == "DEBUG"
        assert payload["basepath"] == "/hello"

    def test_text_appends_extra_fields(self):
        text = TextFormatter().format(make_record(basepath="/hello"))
        assert "[DEBUG] [routes] Api get basepath=/hello" in text


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_replaces_handlers(self, tmp_path):
        setup_logging("DEBUG")
        setup_logging("INFO", json_format=True, log_file=str(tmp_path / "cli.log"))
        package_logger = logging.getLogger("apigw_cli")
        assert package_logger.level == logging.INFO
        assert len(package_logger.handlers) == 2
        assert all(isinstance(h.formatter, JSONFormatter) for h in package_logger.handlers)
        for handler in package_logger.handlers:
            handler.close()

    def test_adapter_merges_context(self):
        adapter = LoggerAdapter(logging.getLogger("apigw_cli.test"), {"host": "openwhisk.example.com"})
        _, kwargs = adapter.process("msg", {"extra": {"status_code": 200}})
        assert kwargs["extra"] == {"host": "openwhisk.example.com", "status_code": 200}
