import json
import logging
import re
from io import StringIO

import pytest

from plugin_harness.logging import (
    JsonFormatter,
    configure_logging,
    get_logger,
    log_with_data,
)

ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


class RecordingHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def harness_logger():
    """Restore the package logger after configure_logging() touched it"""
    logger = logging.getLogger("plugin_harness")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    logger.handlers = []
    yield logger
    logger.handlers, logger.level, logger.propagate = saved


def test_format_json_log():
    """Test JSON log formatting"""
    formatter = JsonFormatter()
    record = logging.LogRecord(
        "test", logging.INFO, "test.py", 10, "Test message", (), None
    )

    output = formatter.format(record)
    data = json.loads(ANSI_ESCAPE.sub("", output))

    assert data["level"] == "INFO"
    assert data["msg"] == "Test message"


@pytest.mark.parametrize(
    "level,expected_color",
    [
        (logging.DEBUG, "\033[34m"),  # BLUE
        (logging.INFO, "\033[32m"),  # GREEN
        (logging.WARNING, "\033[33m"),  # YELLOW
        (logging.ERROR, "\033[31m\033[1m"),  # RED+BOLD
        (logging.CRITICAL, "\033[35m\033[1m"),  # MAGENTA+BOLD
    ],
)
def test_format_json_log_colors(level, expected_color):
    """Test log level color coding"""
    formatter = JsonFormatter()
    record = logging.LogRecord("test", level, "test.py", 10, "Test message", (), None)
    record.asctime = "2024-01-01 00:00:00"

    output = formatter.format(record)
    assert output.startswith(expected_color)
    assert output.endswith("\033[0m")


def test_format_dict_events():
    """Test dict events and non-JSON data values are rendered"""
    formatter = JsonFormatter()
    record = logging.LogRecord(
        "test", logging.INFO, "test.py", 10, {"event": "sandbox_created"}, (), None
    )
    record.data = {"path": object()}

    data = json.loads(ANSI_ESCAPE.sub("", formatter.format(record)))
    assert "sandbox_created" in data["msg"]
    assert data["data"]["path"].startswith("<object object")


def test_log_with_data():
    """Test structured logging with data"""
    logger = logging.getLogger("plugin_harness_test.data")
    logger.setLevel(logging.INFO)
    handler = RecordingHandler()
    logger.addHandler(handler)

    test_data = {"key": "value"}
    log_with_data(logger, logging.INFO, "Test message", test_data)
    log_with_data(logger, logging.INFO, "Plain message")

    assert len(handler.records) == 2
    assert handler.records[0].data == test_data
    assert not hasattr(handler.records[1], "data")


def test_log_with_data_json_structure():
    """Test structured logging produces valid JSON"""
    logger = logging.getLogger("plugin_harness_test.json")
    logger.setLevel(logging.INFO)
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)

    test_data = {"key": "value", "nested": {"foo": "bar"}}
    log_with_data(logger, logging.INFO, "Test message", test_data)

    data = json.loads(ANSI_ESCAPE.sub("", stream.getvalue().strip()))
    assert "ts" in data
    assert data["level"] == "INFO"
    assert data["msg"] == "Test message"
    assert data["data"] == test_data


def test_get_logger():
    """Test logger retrieval"""
    assert get_logger("test_module").name == "plugin_harness.test_module"
    assert get_logger("plugin_harness.callers").name == "plugin_harness.callers"


def test_configure_logging(harness_logger):
    """Test logging configuration"""
    configure_logging("DEBUG")
    configure_logging("DEBUG")

    assert harness_logger.level == logging.DEBUG
    assert len(harness_logger.handlers) == 1
    assert isinstance(harness_logger.handlers[0], logging.StreamHandler)
    assert isinstance(harness_logger.handlers[0].formatter, JsonFormatter)
    assert not harness_logger.propagate


def test_configure_logging_from_config(monkeypatch, harness_logger):
    monkeypatch.setenv("PLUGIN_HARNESS_LOG_LEVEL", "warning")

    configure_logging()

    assert harness_logger.level == logging.WARNING
