"""
Tests for structured logging configuration.
"""

import json
import logging
import os
import sys
from unittest.mock import patch

import pytest

from backend.src.utils.logging_config import (
    ConsoleFormatter,
    JSONFormatter,
    configure_logging,
    get_logger,
)


def _record(message="Compliance run finished", **extra):
    record = logging.LogRecord(
        name="careledger.scheduler",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=None,
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestFormatters:

    def test_json_includes_extra_fields(self):
        output = json.loads(JSONFormatter().format(
            _record(organisation_id=7, failed=["open_incidents"])
        ))

        assert output["logger"] == "careledger.scheduler"
        assert output["level"] == "INFO"
        assert output["message"] == "Compliance run finished"
        assert output["organisation_id"] == 7
        assert output["failed"] == ["open_incidents"]
        assert output["timestamp"].endswith("Z")

    def test_json_includes_exception(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record()
            record.exc_info = sys.exc_info()

        output = json.loads(JSONFormatter().format(record))

        assert "RuntimeError: boom" in output["exception"]

    def test_console_appends_extra_fields(self):
        line = ConsoleFormatter().format(_record(total_created=4))

        assert "INFO - careledger.scheduler - Compliance run finished" in line
        assert line.endswith("total_created=4")


class TestLoggers:

    def test_known_names(self):
        for name in ("api", "services", "db", "scheduler"):
            assert get_logger(name).name == f"careledger.{name}"

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown logger name"):
            get_logger("billing")

    def test_production_writes_json_files(self, tmp_path):
        env = {
            "CARELEDGER_ENV": "production",
            "CARELEDGER_LOG_DIR": str(tmp_path),
            "CARELEDGER_LOG_LEVEL": "INFO",
        }
        with patch.dict(os.environ, env):
            loggers = configure_logging()

        try:
            loggers["scheduler"].info("Compliance run finished", extra={"total_created": 3})
            for handler in loggers["scheduler"].handlers:
                handler.flush()

            line = (tmp_path / "scheduler.log").read_text().strip()
            assert json.loads(line)["total_created"] == 3
        finally:
            for logger in loggers.values():
                for handler in logger.handlers:
                    handler.close()
            configure_logging()
