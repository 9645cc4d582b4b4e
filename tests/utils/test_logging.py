# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the structured JSON logger.

We verify:
  - output is valid JSON and lands on stderr, never stdout
  - all mandatory fields are present (ts, level, module, msg)
  - log levels filter correctly, including package-wide overrides
  - extra context fields get merged into the JSON
"""

import json
import logging
from pathlib import Path

import pytest

from viperctl.logging.logger import get_logger, set_package_log_level


@pytest.fixture(autouse=True)
def _reset_loggers() -> None:
    yield  # type: ignore[misc]
    for name in list(logging.Logger.manager.loggerDict):
        if name.startswith("viperctl.test"):
            logger = logging.getLogger(name)
            for handler in logger.handlers:
                handler.close()
            logger.handlers.clear()


class TestJsonOutput:
    def test_output_is_valid_json_on_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("viperctl.test.json", log_level="INFO")
        logger.info("hello")
        captured = capsys.readouterr()

        assert captured.out == ""
        parsed = json.loads(captured.err.strip())
        assert isinstance(parsed, dict)

    def test_mandatory_fields_are_present(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("viperctl.test.fields", log_level="INFO")
        logger.info("test message")
        parsed = json.loads(capsys.readouterr().err.strip())

        assert parsed["level"] == "INFO"
        assert parsed["module"] == "viperctl.test.fields"
        assert parsed["msg"] == "test message"
        assert "ts" in parsed

    def test_extra_fields_are_included(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("viperctl.test.extra", log_level="DEBUG")
        logger.info("Stage finished", extra={"stage": "link", "argv": ["ld", "-o", "output"]})
        parsed = json.loads(capsys.readouterr().err.strip())

        assert parsed["stage"] == "link"
        assert parsed["argv"] == ["ld", "-o", "output"]

    def test_exception_is_serialized(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("viperctl.test.exc", log_level="INFO")
        try:
            raise RuntimeError("kaboom")
        except RuntimeError:
            logger.error("failed", exc_info=True)
        parsed = json.loads(capsys.readouterr().err.strip())

        assert "kaboom" in parsed["exception"]


class TestLogLevelFiltering:
    def test_debug_messages_hidden_at_info_level(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        logger = get_logger("viperctl.test.level_filter", log_level="INFO")
        logger.debug("this should not appear")
        assert capsys.readouterr().err.strip() == ""

    def test_second_call_updates_level_without_duplicating(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        get_logger("viperctl.test.relevel", log_level="INFO")
        logger = get_logger("viperctl.test.relevel", log_level="DEBUG")
        logger.debug("now visible")

        lines = capsys.readouterr().err.strip().splitlines()
        assert len(logger.handlers) == 1
        assert len(lines) == 1

    def test_package_level_applies_to_existing_loggers(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        logger = get_logger("viperctl.test.package", log_level="DEBUG")
        set_package_log_level("ERROR")
        logger.warning("quiet")

        assert capsys.readouterr().err.strip() == ""
        set_package_log_level("INFO")


class TestFileOutput:
    def test_logs_are_written_to_file(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "viperctl.log"
        logger = get_logger("viperctl.test.file_output", log_level="INFO", log_file=log_file)
        logger.info("file log test")

        parsed = json.loads(log_file.read_text(encoding="utf-8").strip())
        assert parsed["msg"] == "file log test"


class TestInvalidLogLevel:
    def test_invalid_level_raises_value_error(self) -> None:
        with pytest.raises(ValueError, match="Invalid log level"):
            get_logger("viperctl.test.invalid", log_level="LOUD")
