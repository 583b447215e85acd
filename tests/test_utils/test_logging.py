"""
Tests for qperform.utils.logging — root logger setup.

What we test
------------
  - configure_logging(): root level follows the config, one stdout handler
    by default, a file handler when log_file is set.
  - JSON format: one object per line with ts/level/logger/msg and any
    ``extra=`` fields at the top level.
"""

from __future__ import annotations

import json
import logging

import pytest

from qperform.config import LoggingConfig
from qperform.utils.logging import configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


class TestConfigureLogging:
    def test_level_and_console_handler(self):
        configure_logging(LoggingConfig(level="debug"))
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)

    def test_file_handler_writes_json_lines(self, tmp_path):
        log_file = tmp_path / "logs" / "qperform.log"
        configure_logging(LoggingConfig(level="INFO", log_file=str(log_file), json_format=True))

        logging.getLogger("qperform.test").info("loaded %d rows", 3, extra={"source": "perf.csv"})
        for handler in logging.getLogger().handlers:
            handler.flush()

        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        payload = json.loads(line)
        assert payload["level"] == "INFO"
        assert payload["logger"] == "qperform.test"
        assert payload["msg"] == "loaded 3 rows"
        assert payload["source"] == "perf.csv"
        assert "args" not in payload

    def test_debug_records_below_level_dropped(self, tmp_path):
        log_file = tmp_path / "qperform.log"
        configure_logging(LoggingConfig(level="WARNING", log_file=str(log_file)))

        logging.getLogger("qperform.test").info("hidden")
        logging.getLogger("qperform.test").warning("shown")
        for handler in logging.getLogger().handlers:
            handler.flush()

        text = log_file.read_text(encoding="utf-8")
        assert "shown" in text
        assert "hidden" not in text
